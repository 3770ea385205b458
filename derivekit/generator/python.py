"""Python module renderer for derivekit records."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from jinja2 import Environment, PackageLoader

from .emitters import emit_record, required_capabilities
from .errors import GenerationError
from .parser import parse
from .planner import PlanOutcome, RecordPlan, plan_each

logger = logging.getLogger(__name__)

DEFAULT_RUNTIME_IMPORT = "derivekit.runtime"
DEFAULT_MODULE_NAME = "derivekit_generated"

env = Environment(
    loader=PackageLoader("derivekit.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("python.py.j2")

# Capabilities supplied by the runtime
RUNTIME_CAPABILITIES = {
    "Eq": "_rt.Eq",
    "Ord": "_rt.Ord",
    "Hash": "_rt.Hash",
}


@dataclass(frozen=True)
class RenderOptions:
    """Options of one generation run."""

    runtime_import: str = DEFAULT_RUNTIME_IMPORT
    keep_going: bool = False
    source: str | None = None


def _bases(plan: RecordPlan) -> str:
    names = ["_rt.Record"]
    names.extend(RUNTIME_CAPABILITIES.get(c, c) for c in plan.record.capabilities)
    return ", ".join(names)


def _tuple(items: Iterable[str]) -> str:
    quoted = [f'"{i}"' for i in items]
    if len(quoted) == 1:
        return f"({quoted[0]},)"
    return f"({', '.join(quoted)})"


def _slots(plan: RecordPlan) -> str:
    return _tuple(f.storage for f in plan.record.fields)


def _requires(plan: RecordPlan) -> str:
    return _tuple(required_capabilities(plan))


def _accessor(plan: RecordPlan) -> list[str]:
    result = []
    for a in plan.accessors:
        visibility = a.descriptor.visibility
        result.append(
            f'_rt.Accessor("{a.name}", "{a.storage}", '
            f"readable={visibility.readable}, writable={visibility.writable})"
        )
    return result


def render(plans: list[RecordPlan], options: RenderOptions | None = None) -> str:
    """Render planned records to Python source code."""
    options = options or RenderOptions()
    exported: list[str] = []
    for plan in plans:
        exported.extend(a for a in plan.record.aliases if a not in exported)

    logger.debug("rendering %d record(s)", len(plans))
    return template.render(
        plans=plans,
        options=options,
        bases=_bases,
        slots=_slots,
        requires=_requires,
        accessors=_accessor,
        bodies=emit_record,
        exported=exported,
    )


def plan_text(text: str) -> list[PlanOutcome]:
    """Parse a definition file and plan each of its records."""
    return list(plan_each(parse(text)))


def generate(
    text: str, options: RenderOptions | None = None
) -> tuple[str, list[GenerationError]]:
    """Generate a module from a definition file.

    Raises the error of the first failing record unless `keep_going` is set,
    in which case failing records are left out and their errors returned.
    """
    options = options or RenderOptions()
    plans: list[RecordPlan] = []
    errors: list[GenerationError] = []
    for outcome in plan_text(text):
        if outcome.error is not None:
            if not options.keep_going:
                raise outcome.error
            logger.warning("skipping %s: %s", outcome.name, outcome.error)
            errors.append(outcome.error)
        elif outcome.plan is not None:
            plans.append(outcome.plan)
    return render(plans, options), errors


def load(
    text: str,
    options: RenderOptions | None = None,
    name: str = DEFAULT_MODULE_NAME,
    namespace: dict[str, object] | None = None,
) -> dict[str, object]:
    """Generate a module and execute it, returning its namespace.

    `namespace` provides names the definitions refer to, such as user capabilities.
    """
    source, _ = generate(text, options)
    namespace = {**(namespace or {}), "__name__": name}
    exec(compile(source, f"<{name}>", "exec"), namespace)  # noqa: S102
    return namespace
