"""
config.py - Engine Policy Configuration

EnginePolicy holds the switches for the business rules that have more than
one reasonable answer (chargeback finality, locked accounts, client checks,
disputable withdrawals). The defaults reproduce the standard behaviour; a
YAML file can override any of them.

Example policy.yaml:
    policy:
      validate_client: false
      reject_deposits_when_locked: true
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


@dataclass(frozen=True, slots=True)
class EnginePolicy:
    """
    Business-rule switches of the LedgerEngine.

    Attributes:
        chargeback_retires_transaction: A charged back transaction can never
            be disputed again.
        reject_deposits_when_locked: Ignore deposits into locked accounts.
        reject_withdrawals_when_locked: Ignore withdrawals from locked accounts.
        validate_client: Ignore dispute/resolve/chargeback records whose client
            differs from the client of the referenced transaction.
        dispute_withdrawals: Allow withdrawals to be disputed like deposits.
    """
    chargeback_retires_transaction: bool = True
    reject_deposits_when_locked: bool = False
    reject_withdrawals_when_locked: bool = False
    validate_client: bool = True
    dispute_withdrawals: bool = True


DEFAULT_POLICY = EnginePolicy()

_POLICY_KEYS = tuple(f.name for f in fields(EnginePolicy))


class PolicyValidationError(ValueError):
    """Raised when a policy mapping or config file is invalid."""
    pass


def policy_from_mapping(raw: Dict[str, Any], base: Optional[EnginePolicy] = None) -> EnginePolicy:
    """Build a policy from a mapping of switch names to booleans, on top of base."""
    if not isinstance(raw, dict):
        raise PolicyValidationError("policy must be a mapping")
    unknown = sorted(set(raw) - set(_POLICY_KEYS))
    if unknown:
        raise PolicyValidationError(
            f"unknown policy keys: {', '.join(map(str, unknown))}; "
            f"expected any of: {', '.join(_POLICY_KEYS)}"
        )
    for key, value in raw.items():
        if not isinstance(value, bool):
            raise PolicyValidationError(f"`{key}` must be true or false, got {value!r}")
    return replace(base or DEFAULT_POLICY, **raw)


def load_policy(path: Union[str, Path]) -> EnginePolicy:
    """
    Load an EnginePolicy from a YAML file.

    The switches may sit at the top level or under a `policy:` mapping.
    An empty file yields the default policy.
    """
    policy_path = Path(path)
    if not policy_path.exists():
        raise PolicyValidationError(f"Config file not found: {policy_path}")

    try:
        raw = yaml.safe_load(policy_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise PolicyValidationError(f"Config file is not valid YAML: {e}") from e
    if raw is None:
        return DEFAULT_POLICY
    if not isinstance(raw, dict):
        raise PolicyValidationError("Config root must be a YAML mapping")

    if "policy" in raw:
        extra = sorted(set(raw) - {"policy"})
        if extra:
            raise PolicyValidationError(f"unexpected top-level keys: {', '.join(map(str, extra))}")
        raw = raw["policy"] or {}

    return policy_from_mapping(raw)
