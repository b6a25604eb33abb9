"""
Client manifest compiler for the rental rules engine.

Compiles wizard rule definitions into deterministic JSON for the client
form layer, so server and client validate from one source of truth.

Key Components:
- compiler: RuleSet / wizard -> manifest, checksum
- canonicalizer: Ensures deterministic JSON output

Design Principles:
- Determinism: Same definitions produce byte-for-byte identical output
- Single source: Postal patterns and employment branching ship with the rules
"""

from rental_rules.compiler.canonicalizer import canonicalize_json
from rental_rules.compiler.compiler import compile_rule_set, compile_wizard, manifest_checksum

__all__ = [
    "compile_rule_set",
    "compile_wizard",
    "manifest_checksum",
    "canonicalize_json",
]
