"""CoSERV result translator -- converts result sets to relation bundles.

Reference-value quads become RvRelations:
    condition: reference-values ECT with the quad's environment and claims
    addition:  reference-values ECT with the same environment, the quad's
               authorities and the document profile

Trust-anchor quads become EvRelations:
    condition: endorsements ECT with the quad's environment, its
               authorized-by list and one claim per key, each key wrapped
               as an attest-key TypedCryptoKey extension
    addition:  endorsements ECT with the quad's authorities and the
               document profile

Any other result-set variant contributes nothing.
"""

from __future__ import annotations

import logging

from coserv_store.errors import EmptyResultSet, MissingResults, NoRelevantQuads
from coserv_store.models.corim import (
    INTERP_KEYS_EXT_ID,
    CryptoKey,
    ElementMap,
    KeyType,
    MeasurementValues,
    Profile,
    TypedCryptoKey,
)
from coserv_store.models.coserv import (
    AkQuad,
    Coserv,
    ReferenceValuesResult,
    ResultSetChoice,
    RvQuad,
    TrustAnchorsResult,
)
from coserv_store.models.ect import CmType, Ect
from coserv_store.models.relations import EvRelation, RelationBundle, RvRelation

log = logging.getLogger(__name__)


def _rv_relation(quad: RvQuad, profile: Profile | None) -> RvRelation:
    """Build the condition/addition pair for one reference-value quad."""
    triple = quad.triple
    condition = Ect.build(
        kind=CmType.REFERENCE_VALUES,
        environment=triple.ref_env,
        elements=list(triple.ref_claims),
    )
    addition = Ect.build(
        kind=CmType.REFERENCE_VALUES,
        environment=triple.ref_env,
        authorities=list(quad.authorities),
        profile=profile,
    )
    return RvRelation(condition=condition, addition=addition)


def _attest_key_element(key: CryptoKey, mkey: str | int | None) -> ElementMap:
    """Wrap a raw trust-anchor key as a claim carrying a typed key extension."""
    typed = TypedCryptoKey(key=key, key_type=KeyType.ATTEST_KEY)
    return ElementMap(
        mkey=mkey,
        mval=MeasurementValues(extensions={INTERP_KEYS_EXT_ID: typed}),
    )


def _ev_relation(quad: AkQuad, profile: Profile | None) -> EvRelation:
    """Build the condition/addition pair for one trust-anchor quad."""
    triple = quad.triple
    conditions = triple.conditions
    mkey = conditions.mkey if conditions is not None else None
    authorized_by = (
        conditions.authorized_by
        if conditions is not None and conditions.authorized_by is not None
        else []
    )

    condition = Ect.build(
        kind=CmType.ENDORSEMENTS,
        environment=triple.environment,
        authorities=list(authorized_by),
        elements=[_attest_key_element(key, mkey) for key in triple.key_list],
    )
    addition = Ect.build(
        kind=CmType.ENDORSEMENTS,
        authorities=list(quad.authorities),
        profile=profile,
    )
    return EvRelation(condition=[condition], addition=[addition])


def translate_result_set(
    result_set: ResultSetChoice,
    profile: Profile | None,
) -> RelationBundle:
    """Translate one populated result set into a relation bundle.

    Args:
        result_set: The result-set variant carried by the document.
        profile: The document profile, attached to every addition record.

    Returns:
        A bundle holding at least one relation.

    Raises:
        NoRelevantQuads: If the variant is not handled or has no quads.
        RecordBuildError: If a condition or addition record is invalid.
    """
    bundle = RelationBundle()

    if isinstance(result_set, ReferenceValuesResult):
        for quad in result_set.rv_quads:
            bundle.rv_list.append(_rv_relation(quad, profile))
    elif isinstance(result_set, TrustAnchorsResult):
        for quad in result_set.ak_quads:
            bundle.ev_list.append(_ev_relation(quad, profile))
    else:
        log.debug("Ignoring unsupported result-set variant %r", result_set.type)
        raise NoRelevantQuads(
            f"no relevant quads found in CoSERV result "
            f"(unsupported variant {result_set.type!r})",
            reason=NoRelevantQuads.UNSUPPORTED_VARIANT,
            variant=result_set.type,
        )

    if bundle.is_empty():
        raise NoRelevantQuads(
            f"no relevant quads found in CoSERV result "
            f"({result_set.type!r} result set is empty)",
            reason=NoRelevantQuads.EMPTY_QUADS,
            variant=result_set.type,
        )

    log.debug(
        "Translated %r result set: %d rv, %d ev relation(s)",
        result_set.type,
        len(bundle.rv_list),
        len(bundle.ev_list),
    )
    return bundle


def translate(document: Coserv) -> RelationBundle:
    """Translate a decoded CoSERV document into a relation bundle.

    Raises:
        MissingResults: If the document has no results section.
        EmptyResultSet: If the results section holds no result set.
        NoRelevantQuads: If the result set yields no relations.
        RecordBuildError: If a built record violates its rules.
    """
    if document.results is None:
        raise MissingResults("The CoSERV object has no results section.")
    if document.results.result_set is None:
        raise EmptyResultSet(
            "The CoSERV object has not been populated with results."
        )
    return translate_result_set(document.results.result_set, document.profile)
