"""
test_config.py - Unit tests for EnginePolicy loading
"""

import pytest

from clearing import EnginePolicy, DEFAULT_POLICY, PolicyValidationError, load_policy
from clearing.config import policy_from_mapping


@pytest.fixture
def write_yaml(write_csv):
    def _write(content: str):
        return write_csv(content, name="policy.yaml")
    return _write


class TestDefaults:

    def test_default_policy(self):
        assert DEFAULT_POLICY.chargeback_retires_transaction is True
        assert DEFAULT_POLICY.reject_deposits_when_locked is False
        assert DEFAULT_POLICY.reject_withdrawals_when_locked is False
        assert DEFAULT_POLICY.validate_client is True
        assert DEFAULT_POLICY.dispute_withdrawals is True

    def test_policy_is_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_POLICY.validate_client = False


class TestLoadPolicy:

    def test_top_level_keys(self, write_yaml):
        path = write_yaml("""
            reject_deposits_when_locked: true
            validate_client: false
        """)
        policy = load_policy(path)
        assert policy == EnginePolicy(reject_deposits_when_locked=True, validate_client=False)

    def test_nested_policy_mapping(self, write_yaml):
        path = write_yaml("""
            policy:
              chargeback_retires_transaction: false
        """)
        assert load_policy(path).chargeback_retires_transaction is False

    def test_empty_file_gives_defaults(self, write_yaml):
        assert load_policy(write_yaml("")) == DEFAULT_POLICY

    def test_empty_nested_mapping_gives_defaults(self, write_yaml):
        assert load_policy(write_yaml("policy:\n")) == DEFAULT_POLICY

    def test_missing_file(self, tmp_path):
        with pytest.raises(PolicyValidationError, match="not found"):
            load_policy(tmp_path / "nope.yaml")

    def test_unknown_key(self, write_yaml):
        path = write_yaml("freeze_everything: true\n")
        with pytest.raises(PolicyValidationError, match="unknown policy keys"):
            load_policy(path)

    def test_non_boolean_value(self, write_yaml):
        path = write_yaml("validate_client: \"no\"\n")
        with pytest.raises(PolicyValidationError, match="true or false"):
            load_policy(path)

    def test_root_must_be_mapping(self, write_yaml):
        with pytest.raises(PolicyValidationError, match="mapping"):
            load_policy(write_yaml("- validate_client\n"))

    def test_extra_keys_beside_policy(self, write_yaml):
        path = write_yaml("""
            policy:
              validate_client: false
            verbose: true
        """)
        with pytest.raises(PolicyValidationError, match="unexpected top-level keys"):
            load_policy(path)

    def test_invalid_yaml(self, write_yaml):
        with pytest.raises(PolicyValidationError, match="not valid YAML"):
            load_policy(write_yaml("policy: [unclosed\n"))

    def test_error_is_value_error(self):
        assert issubclass(PolicyValidationError, ValueError)


class TestPolicyFromMapping:

    def test_overrides_base(self):
        base = EnginePolicy(validate_client=False)
        policy = policy_from_mapping({"dispute_withdrawals": False}, base=base)
        assert policy.validate_client is False
        assert policy.dispute_withdrawals is False

    def test_rejects_non_mapping(self):
        with pytest.raises(PolicyValidationError):
            policy_from_mapping(["validate_client"])
