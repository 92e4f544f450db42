"""
Property-based tests for the condition evaluator, spec hash and rate limiter.

Uses Hypothesis to generate random inputs and check invariants that must
hold for all of them.
"""

from __future__ import annotations

import copy
import string

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from fdspec.core import ir
from fdspec.core.linker import compute_spec_hash
from fdspec.runtime.conditions import evaluate_condition
from fdspec.runtime.rate_limit import RateLimitConfig, RateLimiter


# =============================================================================
# Strategy Definitions
# =============================================================================


identifiers = st.text(alphabet=string.ascii_lowercase + "_", min_size=1, max_size=12)

scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-1000, max_value=1000),
    st.text(max_size=10),
)

# Expression-like text built from the evaluator's own vocabulary
expression_tokens = st.sampled_from(
    [
        "user.id",
        "resource.status",
        "resource.amount",
        "'draft'",
        "42",
        "null",
        "true",
        " = ",
        " != ",
        " > ",
        " <= ",
        " AND ",
        " OR ",
        "NOT ",
        " IS NULL",
        " IS NOT NULL",
        " IN ",
        "('a','b')",
        "(",
        ")",
    ]
)
expressions = st.lists(expression_tokens, max_size=8).map("".join)


# =============================================================================
# Condition evaluator
# =============================================================================


@given(expression=st.text(max_size=60))
def test_arbitrary_text_never_raises(expression):
    result = evaluate_condition(expression, {"user": {"id": "u1"}, "resource": {}})
    assert result is True or result is False


@given(
    expression=expressions,
    resource=st.dictionaries(st.sampled_from(["status", "amount"]), scalars),
)
def test_generated_expressions_return_bool(expression, resource):
    result = evaluate_condition(expression, {"user": {"id": "u1"}, "resource": resource})
    assert isinstance(result, bool)


@given(value=scalars)
def test_value_equals_itself(value):
    context = {"resource": {"a": value, "b": value}}
    assert evaluate_condition("resource.a = resource.b", context)


@given(value=scalars)
def test_null_checks_are_complementary(value):
    context = {"resource": {"x": value}}
    is_null = evaluate_condition("resource.x IS NULL", context)
    is_not_null = evaluate_condition("resource.x IS NOT NULL", context)
    assert is_null != is_not_null


# =============================================================================
# Spec hash
# =============================================================================


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(order=st.permutations(["product", "entities", "actions", "policies"]))
def test_hash_ignores_document_order(order_docs, order):
    reordered = {key: order_docs[key] for key in order}
    assert compute_spec_hash(ir.Spec.from_documents(reordered)) == compute_spec_hash(
        ir.Spec.from_documents(order_docs)
    )


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(description=st.text(min_size=1, max_size=40))
def test_hash_tracks_content(order_docs, description):
    documents = copy.deepcopy(order_docs)
    baseline = compute_spec_hash(ir.Spec.from_documents(documents))

    documents["entities"]["Order"]["description"] = description
    assert compute_spec_hash(ir.Spec.from_documents(documents)) != baseline


# =============================================================================
# Rate limiter
# =============================================================================


@settings(max_examples=50)
@given(
    rpm=st.integers(min_value=0, max_value=20),
    burst=st.integers(min_value=0, max_value=5),
    attempts=st.integers(min_value=0, max_value=40),
    key=identifiers,
)
def test_allowed_never_exceeds_quota(rpm, burst, attempts, key):
    limiter = RateLimiter(RateLimitConfig(requests_per_minute=rpm, burst=burst), clock=lambda: 0.0)
    allowed = sum(limiter.consume(key).allowed for _ in range(attempts))
    assert allowed == min(attempts, rpm + burst)
