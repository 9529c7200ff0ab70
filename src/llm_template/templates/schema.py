"""Schema resolution for template bundles.

A bundle may carry a ``schema.py`` script describing the structured output
expected from the model. Scripts use pydantic as the schema builder:

    class ExtractMetadata(BaseModel):
        document_type: str
        key_topics: list[str]

or end with an expression that evaluates to a model or ``TypeAdapter``:

    TypeAdapter(list[str])

Context variables are bound as global names inside the script.
"""

from __future__ import annotations

import ast
import importlib.util
import inspect
import json
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import logfire

from llm_template.errors import SchemaDependencyError, SchemaDocumentError, SchemaResolutionError

SCHEMA_BUILDER_PACKAGE = "pydantic"

# Name bound by scripts that do not end with an expression
SCHEMA_RESULT_NAME = "schema"

_WORD_SEPARATORS = re.compile(r"[_\-\s]+")


def schema_builder_available() -> bool:
    """Check whether the schema builder library can be imported.

    pydantic is a declared dependency, so this is normally true; it only
    fails where pydantic was removed from the environment after install.
    """
    return importlib.util.find_spec(SCHEMA_BUILDER_PACKAGE) is not None


def class_name_for(template_name: str) -> str:
    """Convert a bundle name to the PascalCase name used for schema lookup.

    Only the last path segment is used, so ``"reports/extract_metadata"``
    becomes ``"ExtractMetadata"``.
    """
    segment = template_name.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]
    return "".join(part.capitalize() for part in _WORD_SEPARATORS.split(segment) if part)


def is_builder_instance(value: Any) -> bool:
    """True for objects that can be converted to a JSON schema document."""
    from pydantic import BaseModel, TypeAdapter

    return isinstance(value, (TypeAdapter, BaseModel))


def is_builder_definition(value: Any) -> bool:
    """True for pydantic model classes."""
    from pydantic import BaseModel

    return inspect.isclass(value) and issubclass(value, BaseModel)


def schema_document(artifact: Any) -> dict[str, Any]:
    """Convert a resolved schema artifact to a declarative JSON schema document.

    Args:
        artifact: A ``TypeAdapter``, a pydantic model class or instance,
            or an already declarative mapping

    Returns:
        JSON schema as a dict
    """
    if isinstance(artifact, Mapping):
        return dict(artifact)

    from pydantic import BaseModel, TypeAdapter

    if isinstance(artifact, TypeAdapter):
        return artifact.json_schema()
    if isinstance(artifact, BaseModel):
        return type(artifact).model_json_schema()
    if is_builder_definition(artifact):
        return artifact.model_json_schema()

    raise TypeError(f"Cannot convert {type(artifact).__name__} to a JSON schema document")


def build_script_namespace(
    context: Mapping[str, Any] | None,
    module_name: str,
) -> dict[str, Any]:
    """Create the isolated global namespace a schema script runs in."""
    from pydantic import BaseModel, Field, TypeAdapter

    namespace: dict[str, Any] = {
        "__name__": module_name,
        "BaseModel": BaseModel,
        "Field": Field,
        "TypeAdapter": TypeAdapter,
    }
    if context:
        namespace.update({str(key): value for key, value in context.items()})
    return namespace


def evaluate_script(source: str, filename: str, namespace: dict[str, Any]) -> Any:
    """Execute a schema script and return its result.

    The result is the value of the trailing expression statement, or the
    value bound to ``schema`` when the script ends with anything else.
    The script is compiled without this module's ``__future__`` flags, and
    models it defines are rebuilt against its namespace before the trailing
    expression runs, so forward references between them resolve.
    """
    tree = ast.parse(source, filename=filename)

    tail: ast.Expression | None = None
    if tree.body and isinstance(tree.body[-1], ast.Expr):
        tail = ast.Expression(body=tree.body.pop().value)

    body = compile(tree, filename, "exec", dont_inherit=True)
    exec(body, namespace)  # noqa: S102  # nosec B102
    rebuild_models(namespace)

    if tail is not None:
        expression = compile(tail, filename, "eval", dont_inherit=True)
        return eval(expression, namespace)  # noqa: S307  # nosec B307
    return namespace.get(SCHEMA_RESULT_NAME)


def rebuild_models(namespace: Mapping[str, Any]) -> None:
    """Resolve pending forward references of models defined in a script.

    Script modules are not registered in ``sys.modules``, so pydantic cannot
    find names referenced by string annotations on its own. Models that
    still cannot be completed are left as they are.
    """
    for value in list(namespace.values()):
        if is_builder_definition(value) and not value.__pydantic_complete__:
            value.model_rebuild(raise_errors=False, _types_namespace=dict(namespace))


def _complete_model(model: Any, namespace: Mapping[str, Any]) -> Any:
    if not model.__pydantic_complete__:
        model.model_rebuild(_types_namespace=dict(namespace))
    return model


def _lookup_candidates(class_name: str) -> list[str]:
    return [f"{class_name}.Schema", f"{class_name}Schema", class_name]


def _lookup(namespace: Mapping[str, Any], dotted_name: str) -> Any:
    head, _, rest = dotted_name.partition(".")
    value = namespace.get(head)
    for attr in rest.split(".") if rest else []:
        value = getattr(value, attr, None)
    return value


def _describe(value: Any) -> str:
    if inspect.isclass(value):
        label, kind = "class", value.__name__
    else:
        label, kind = "value", type(value).__name__
    exposes = "yes" if is_builder_instance(value) or is_builder_definition(value) else "no"
    return f"{label} of kind {kind} (exposes JSON schema conversion: {exposes})"


def load_schema(script: Path, template_name: str, context: Mapping[str, Any] | None = None) -> Any:
    """Evaluate a bundle's schema script and resolve the schema builder it produces.

    Args:
        script: Path to ``schema.py``
        template_name: Bundle name, used for naming-convention lookup
        context: Variables bound inside the script

    Returns:
        A pydantic ``TypeAdapter`` or model instance

    Raises:
        SchemaDependencyError: If pydantic is not installed
        SchemaResolutionError: If the script fails or yields no schema
    """
    label = f"{template_name}/{script.name}"

    if not schema_builder_available():
        raise SchemaDependencyError(
            f"Schema file '{label}' found but {SCHEMA_BUILDER_PACKAGE} is not installed.",
            template_name=template_name,
            role="schema",
            suggestion=f"Add '{SCHEMA_BUILDER_PACKAGE}' to your project dependencies.",
        )

    from pydantic import TypeAdapter

    source = script.read_text(encoding="utf-8")
    module_name = f"llm_template.schemas.{class_name_for(template_name) or 'bundle'}"
    namespace = build_script_namespace(context, module_name)

    try:
        result = evaluate_script(source, str(script), namespace)
    except Exception as e:
        logfire.error("Schema script failed", template=template_name, error=str(e))
        raise SchemaResolutionError(
            f"Failed to load schema from '{label}': {e}",
            template_name=template_name,
            role="schema",
        ) from e

    if is_builder_instance(result):
        logfire.debug("Schema resolved from script result", template=template_name)
        return result

    class_name = class_name_for(template_name)
    candidates = _lookup_candidates(class_name)

    model: Any = None
    if is_builder_definition(result):
        model = result
        logfire.debug(
            "Schema resolved from model class", template=template_name, model=model.__name__
        )
    else:
        for candidate in candidates:
            value = _lookup(namespace, candidate)
            if is_builder_definition(value):
                model = value
                logfire.debug("Schema resolved by name", template=template_name, model=candidate)
                break

    if model is None:
        raise SchemaResolutionError(
            f"Failed to load schema from '{label}': script must evaluate to a pydantic "
            f"TypeAdapter or BaseModel, or define one of {', '.join(candidates)}; "
            f"got {_describe(result)}",
            template_name=template_name,
            role="schema",
        )

    try:
        return TypeAdapter(_complete_model(model, namespace))
    except Exception as e:
        logfire.error("Schema model could not be built", template=template_name, error=str(e))
        raise SchemaResolutionError(
            f"Failed to load schema from '{label}': {e}",
            template_name=template_name,
            role="schema",
        ) from e


def build_schema_document(artifact: Any, template_name: str) -> dict[str, Any]:
    """Convert a bundle's schema artifact to a JSON schema document.

    Raises:
        SchemaResolutionError: If the artifact cannot be converted, e.g. a
            model with forward references that never resolve
    """
    try:
        return schema_document(artifact)
    except Exception as e:
        logfire.error("Schema conversion failed", template=template_name, error=str(e))
        raise SchemaResolutionError(
            f"Failed to build JSON schema from '{template_name}/schema.py': {e}",
            template_name=template_name,
            role="schema",
        ) from e


def parse_schema_document(text: str, template_name: str) -> dict[str, Any] | None:
    """Parse a rendered legacy declarative schema document.

    Returns None when the rendered document is empty.

    Raises:
        SchemaDocumentError: If the text is not a JSON object
    """
    text = text.strip()
    if not text:
        return None

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaDocumentError(
            f"Invalid JSON in '{template_name}/schema.txt.j2': {e}",
            template_name=template_name,
            role="schema",
        ) from e

    if not isinstance(document, dict):
        raise SchemaDocumentError(
            f"Schema document '{template_name}/schema.txt.j2' must be a JSON object, "
            f"got {type(document).__name__}",
            template_name=template_name,
            role="schema",
        )
    return document
