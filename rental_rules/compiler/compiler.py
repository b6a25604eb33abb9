"""
Client manifest compiler.

Compiles rule sets and wizards into deterministic JSON consumed by the
client form layer. Server and client both read the same definitions:
field rules, postal code patterns and the employment requirement table
all come from this package, so a value accepted on one side is accepted on
the other.

The manifest is canonical (sorted keys, sorted sets) and carries a sha256
checksum of its canonical serialization.
"""

import hashlib
import logging
import time
from typing import TYPE_CHECKING, Any

from rental_rules.compiler.canonicalizer import canonicalize_json, to_canonical_json_string
from rental_rules.core.config import settings
from rental_rules.core.errors import CompilationError
from rental_rules.core.observability import metrics
from rental_rules.domain.enums import SaveMode
from rental_rules.locale.postal_codes import postal_code_registry
from rental_rules.rules.composer import rule_composer
from rental_rules.rules.employment import employment_resolver
from rental_rules.rules.model import FieldRule, RuleSet

if TYPE_CHECKING:
    from rental_rules.catalog.wizard import WizardDefinition

logger = logging.getLogger(__name__)

MANIFEST_SCHEMA_VERSION = "1.0"

# Constructs Python's `re` accepts but JavaScript RegExp does not
_PYTHON_ONLY_REGEX_TOKENS = ("(?P<", "(?P=", "\\A", "\\Z", "(?#")


def compile_rule_set(rule_set: RuleSet) -> dict[str, Any]:
    """
    Compile one RuleSet into its manifest form.

    Field order is kept: the client renders errors in the same order the
    server reports them.

    Raises:
        CompilationError: If a rule cannot be expressed for the client
    """
    return {
        "name": rule_set.name,
        "fields": [_compile_rule(rule_set.name, rule) for rule in rule_set.rules],
    }


def _compile_rule(rule_set_name: str, rule: FieldRule) -> dict[str, Any]:
    pattern = rule.constraints.pattern
    if pattern is not None:
        for token in _PYTHON_ONLY_REGEX_TOKENS:
            if token in pattern:
                raise CompilationError(
                    f"Pattern for '{rule.field}' uses '{token}', unsupported by the client",
                    details={"ruleset": rule_set_name, "field": rule.field, "pattern": pattern},
                )

    compiled: dict[str, Any] = {
        "field": rule.field,
        "type": rule.type.value,
        "label": rule.display_label,
        "requiredness": [clause.model_dump() for clause in rule.requiredness],
        "constraints": rule.constraints.model_dump(exclude_defaults=True),
        "messages": {kind.value: template for kind, template in rule.error_messages.items()},
    }
    if pattern is not None:
        compiled["constraints"]["pattern"] = f"^(?:{pattern})$"
    return compiled


def compile_wizard(wizard: "WizardDefinition", mode: SaveMode = SaveMode.STRICT) -> dict[str, Any]:
    """
    Compile a wizard into a canonical client manifest.

    This is the main entry point. It:
    1. Composes each step for the requested mode
    2. Compiles step rule sets and the overlay
    3. Attaches postal code patterns and the employment requirement table
    4. Canonicalizes the result and stamps its checksum

    Args:
        wizard: Wizard definition
        mode: STRICT for publish/submit rules, DRAFT for autosave rules

    Returns:
        Canonical manifest dictionary including `checksum`

    Raises:
        CompilationError: If a rule cannot be expressed for the client
    """
    start_time = time.perf_counter()
    mode = SaveMode(mode)
    logger.info("Starting manifest compilation for wizard %s (%s)", wizard.name, mode.value)

    try:
        # Step 1 + 2: Compose and compile every step
        steps = [
            {
                "number": step.number,
                "key": step.key,
                "ruleset": compile_rule_set(rule_composer.compose([step.rule_set], mode)),
            }
            for step in wizard.steps
        ]
        overlay = compile_rule_set(wizard.overlay) if wizard.overlay is not None else None

        # Step 3: Shared lookup tables
        manifest = {
            "schema_version": MANIFEST_SCHEMA_VERSION,
            "wizard": wizard.name,
            "mode": mode.value,
            "steps": steps,
            "overlay": overlay,
            "postal_codes": postal_code_registry.to_manifest(),
            "employment_requirements": employment_resolver.to_manifest(),
            "default_phone_region": settings.default_phone_region,
        }

        # Step 4: Canonicalize and checksum
        canonical = canonicalize_json(manifest)
        canonical["checksum"] = manifest_checksum(canonical)

        duration = time.perf_counter() - start_time
        logger.info(
            "Compiled wizard %s: %d steps, mode=%s, duration=%.3fs",
            wizard.name,
            len(steps),
            mode.value,
            duration,
        )
        _record_compiler_metrics("success")
        return canonical

    except CompilationError:
        _record_compiler_metrics("error")
        raise


def manifest_checksum(manifest: dict[str, Any]) -> str:
    """
    SHA-256 checksum of a manifest's canonical serialization.

    The `checksum` key itself is excluded so a stamped manifest verifies
    against its own checksum.

    Returns:
        Checksum in format: sha256:<lowercase-hex>
    """
    body = {k: v for k, v in manifest.items() if k != "checksum"}
    data = to_canonical_json_string(body).encode("utf-8")
    return f"sha256:{hashlib.sha256(data).hexdigest()}"


def _record_compiler_metrics(status: str) -> None:
    if settings.observability_enabled:
        metrics.manifest_compilations_total.labels(status=status).inc()
