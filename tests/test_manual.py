"""Tests against real AWS STS.

These tests are skipped in CI by default but can be run locally for manual testing.

To run these tests locally:
    # Requires base credentials (or AWS_PROFILE) that can call sts:GetCallerIdentity
    PDUM_AWS_MANUAL_TESTS=1 uv run pytest tests/test_manual.py -v

    # The role test additionally needs a role, an MFA device, and a current code
    PDUM_AWS_MANUAL_TESTS=1 PDUM_AWS_TEST_ROLE_ARN=arn:aws:iam::... \\
        PDUM_AWS_TEST_MFA_SERIAL=arn:aws:iam::...:mfa/me PDUM_AWS_TEST_MFA_CODE=123456 \\
        uv run pytest tests/test_manual.py -v
"""

import os

import pytest

from pdum.aws.cache import CredentialCache, cache_file_path
from pdum.aws.settings import ensure_storage
from pdum.aws.sts import assume_role_with_mfa, get_caller_identity, sts_client, sts_client_for
from pdum.aws.types import RoleRecord

# Skip these tests in CI unless PDUM_AWS_MANUAL_TESTS environment variable is set
manual_test = pytest.mark.skipif(
    not os.getenv("PDUM_AWS_MANUAL_TESTS"),
    reason="Manual test - requires AWS credentials. Set PDUM_AWS_MANUAL_TESTS=1 to run.",
)


@manual_test
def test_get_caller_identity():
    """Test that the base credentials resolve to an identity."""
    arn = get_caller_identity(sts_client(os.getenv("AWS_PROFILE")))

    assert arn.startswith("arn:aws")
    print(f"\n✓ Base credentials belong to: {arn}")


@manual_test
def test_assume_role_and_cache(settings):
    """Test a full exchange, cache round trip, and identity check."""
    role_arn = os.getenv("PDUM_AWS_TEST_ROLE_ARN")
    mfa_serial = os.getenv("PDUM_AWS_TEST_MFA_SERIAL")
    code = os.getenv("PDUM_AWS_TEST_MFA_CODE")
    if not (role_arn and mfa_serial and code):
        pytest.skip("Set PDUM_AWS_TEST_ROLE_ARN, PDUM_AWS_TEST_MFA_SERIAL and PDUM_AWS_TEST_MFA_CODE.")

    exchange = assume_role_with_mfa(sts_client(os.getenv("AWS_PROFILE")), role_arn, mfa_serial, code)

    ensure_storage(settings)
    role = RoleRecord(name="manual", arn=role_arn)
    cache = CredentialCache(cache_file_path(settings.cache_dir, role), settings)
    record = cache.commit(
        exchange.access_key_id, exchange.secret_access_key, exchange.session_token, exchange.expires_at
    )

    assert CredentialCache(cache.path, settings).load() == record
    assert cache.needs_refresh() is False

    caller = get_caller_identity(sts_client_for(record))
    assert ":assumed-role/" in caller
    print(f"\n✓ Assumed role as: {caller}")
