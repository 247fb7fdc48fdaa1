"""
Declarative tool framework for the GHL MCP Server.

Every GoHighLevel resource family is a ToolModule holding a list of ToolSpec
descriptors. A descriptor names the tool, its pydantic input model, the REST
call it maps to (method + path template), and how arguments and responses are
reshaped. ToolModule.execute_tool() is the single dispatcher that validates,
fills defaults, forwards, and decorates failures by HTTP status code.

Outbound argument flow:
    validated args -> default location -> defaults -> transform
    -> path placeholders -> query/body split -> renames -> client.request()
"""

import logging
import string
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Type
from urllib.parse import quote

from fastmcp.exceptions import ToolError
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

_formatter = string.Formatter()


# =============================================================================
# Errors
# =============================================================================

class GHLToolError(ToolError):
    """A tool call failed. status_code is the remote HTTP status when known."""

    def __init__(self, message: str, status_code: Optional[int] = None, tool: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.tool = tool


class UnknownToolError(GHLToolError):
    def __init__(self, name: str, family: str = "GoHighLevel"):
        super().__init__(f"Unknown {family} tool: {name}", tool=name)


class ToolInputError(GHLToolError):
    """Arguments did not match the tool's input schema."""


# =============================================================================
# Descriptors
# =============================================================================

class _SafeArgs(dict):
    def __missing__(self, key):
        return "unknown"


def render(template: str, values: dict, **extra) -> str:
    """Format a message template with tool arguments, tolerating missing keys."""
    return _formatter.vformat(template, (), _SafeArgs({**values, **extra}))


@dataclass(frozen=True)
class ErrorHint:
    """Guidance text for a status code, optionally narrowed by message keywords."""
    statuses: Tuple[Optional[int], ...]
    text: str
    contains: Tuple[str, ...] = ()

    def matches(self, status: Optional[int], message: str) -> bool:
        if status not in self.statuses:
            return False
        if not self.contains:
            return True
        lowered = message.lower()
        return any(word in lowered for word in self.contains)


def hint(status, text: str, contains=()) -> ErrorHint:
    statuses = (status,) if isinstance(status, int) or status is None else tuple(status)
    if isinstance(contains, str):
        contains = (contains,)
    return ErrorHint(statuses, text, tuple(c.lower() for c in contains))


@dataclass
class ToolSpec:
    """One MCP tool mapped onto one GoHighLevel REST call."""
    name: str
    description: str
    params: Type[BaseModel]
    method: str = "GET"
    path: str = ""
    title: str = ""
    # Argument names sent as query params on write calls / JSON body on GET and DELETE.
    query: Tuple[str, ...] = ()
    body: Tuple[str, ...] = ()
    # Arguments consumed locally and never forwarded.
    exclude: Tuple[str, ...] = ()
    renames: Dict[str, str] = field(default_factory=dict)
    # Filled when the caller omits the argument. Callables receive the args dict.
    defaults: Dict[str, Any] = field(default_factory=dict)
    location: Optional[str] = None
    transform: Optional[Callable[[dict], dict]] = None
    reshape: Optional[Callable[[Any, dict], dict]] = None
    message: Optional[str] = None
    handler: Optional[Callable[["ToolSpec", dict], Awaitable[dict]]] = None
    hints: Tuple[ErrorHint, ...] = ()
    subject: Optional[str] = None
    lookup: Optional[str] = None
    id_field: Optional[str] = None
    read_only: Optional[bool] = None
    destructive: Optional[bool] = None
    idempotent: Optional[bool] = None

    @property
    def path_fields(self) -> List[str]:
        return [f for _, f, _, _ in _formatter.parse(self.path) if f]

    @property
    def action(self) -> str:
        return self.name.replace("_", " ")

    def annotations(self) -> dict:
        method = self.method.upper()
        read_only = self.read_only if self.read_only is not None else method == "GET"
        destructive = self.destructive if self.destructive is not None else method == "DELETE"
        idempotent = self.idempotent if self.idempotent is not None else method in ("GET", "PUT", "DELETE")
        return {
            "title": self.title or self.name.replace("_", " ").title(),
            "readOnlyHint": read_only,
            "destructiveHint": destructive,
            "idempotentHint": idempotent,
            "openWorldHint": True,
        }


def location_field(description: str = "Location ID (uses default if not provided)"):
    return Field(None, description=description)


def envelope(data: Any = None, message: str = "", **extra) -> dict:
    result = {"success": True}
    if data is not None:
        result["data"] = data
    result.update(extra)
    result["message"] = message
    return result


def count_of(data: Any, key: str) -> int:
    items = data.get(key) if isinstance(data, dict) else None
    return len(items) if isinstance(items, list) else 0


def counted(key: str, label: str, verb: str = "Retrieved"):
    """Reshape hook: pass the data through with a '<verb> N <label>' message."""
    def reshape(data, args):
        return envelope(data, f"{verb} {count_of(data, key)} {label}")
    return reshape


# =============================================================================
# Tool Module
# =============================================================================

class ToolModule:
    """Base class for a GoHighLevel resource family.

    Subclasses implement build_specs(). The injected client supplies the
    default location for location-scoped tools.
    """

    family = "GoHighLevel"
    subject = "resource"
    lookup: Optional[str] = None

    def __init__(self, client):
        self.client = client
        self._specs: Dict[str, ToolSpec] = {}
        for spec in self.build_specs():
            if spec.name in self._specs:
                raise ValueError(f"Duplicate tool name in {self.family} tools: {spec.name}")
            self._specs[spec.name] = spec

    def build_specs(self) -> List[ToolSpec]:
        raise NotImplementedError

    @property
    def location_id(self) -> str:
        return self.client.location_id

    @property
    def tool_names(self) -> List[str]:
        return list(self._specs)

    def has_tool(self, name: str) -> bool:
        return name in self._specs

    def alt_location(self, **extra) -> dict:
        """Defaults that scope altId/altType to the configured location."""
        return {"altId": lambda values: self.location_id, "altType": "location", **extra}

    def get_tool_definitions(self) -> List[dict]:
        return [
            {
                "name": spec.name,
                "description": spec.description,
                "inputSchema": spec.params.model_json_schema(),
                "annotations": spec.annotations(),
            }
            for spec in self._specs.values()
        ]

    async def execute_tool(self, name: str, args: Optional[dict] = None) -> dict:
        spec = self._specs.get(name)
        if spec is None:
            raise UnknownToolError(name, self.family)

        values = self.validate(spec, args or {})
        if spec.handler is not None:
            return await spec.handler(spec, values)

        values = self.resolve(spec, values)
        path, params, body = self.build_request(spec, values)
        data = await self.send(spec, values, spec.method, path, params=params, body=body)
        if spec.reshape is not None:
            return spec.reshape(data, values)
        return envelope(data, render(spec.message or f"{spec.action.capitalize()} completed successfully", values))

    # -------------------------------------------------------------------------
    # Pipeline steps
    # -------------------------------------------------------------------------

    def validate(self, spec: ToolSpec, args: dict) -> dict:
        try:
            model = spec.params.model_validate(args)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
                for err in e.errors()
            )
            raise ToolInputError(f"Invalid arguments for {spec.name}: {problems}", tool=spec.name)
        return model.model_dump(by_alias=True, exclude_none=True)

    def resolve(self, spec: ToolSpec, values: dict) -> dict:
        """Apply default location, defaults and the transform hook."""
        values = dict(values)
        if spec.location and not values.get(spec.location):
            values[spec.location] = self.location_id
        for key, default in spec.defaults.items():
            if values.get(key) is None:
                values[key] = default(values) if callable(default) else default
        if spec.transform is not None:
            values = spec.transform(values)
        return values

    def prepare(self, spec: ToolSpec, values: dict) -> Tuple[str, Optional[dict], Optional[dict]]:
        """Resolve validated arguments and split them into path, query and body."""
        return self.build_request(spec, self.resolve(spec, values))

    def build_request(self, spec: ToolSpec, values: dict) -> Tuple[str, Optional[dict], Optional[dict]]:
        path_fields = spec.path_fields
        path = spec.path.format(**{f: quote(str(values.get(f, "")), safe="") for f in path_fields})

        params: Dict[str, Any] = {}
        body: Dict[str, Any] = {}
        reads = spec.method.upper() in ("GET", "DELETE")
        for key, value in values.items():
            if key in path_fields or key in spec.exclude:
                continue
            outbound = spec.renames.get(key, key)
            if reads:
                (body if key in spec.body else params)[outbound] = value
            else:
                (params if key in spec.query else body)[outbound] = value

        return path, params or None, (body if body or not reads else None)

    async def send(self, spec: ToolSpec, values: dict, method: str, path: str,
                   params: dict = None, body: Any = None) -> Any:
        response = await self.client.request(method, path, params=params, json_body=body)
        if not response.success:
            raise self.describe_error(spec, values, response.error)
        return response.data

    # -------------------------------------------------------------------------
    # Error decoration
    # -------------------------------------------------------------------------

    def identifiers(self, spec: ToolSpec, values: dict) -> str:
        if spec.id_field:
            keys = [spec.id_field]
        else:
            keys = [f for f in spec.path_fields if f != spec.location]
            if not keys:
                keys = [k for k in values if k.endswith(("Id", "Ids")) and k not in ("locationId", "altId")]
        found = []
        for key in keys:
            value = values.get(key)
            if value is None:
                continue
            found.append(", ".join(map(str, value)) if isinstance(value, list) else str(value))
        return ", ".join(found) or "unknown"

    def default_guidance(self, spec: ToolSpec, values: dict, status: Optional[int]) -> Optional[str]:
        subject = spec.subject or self.subject
        lookup = spec.lookup or self.lookup
        if status in (401, 403):
            return (
                f"Permission denied for {spec.name}.\n"
                f"The API token lacks the scope needed for {subject} operations, "
                f"or the location does not belong to this token.\n"
                f"Check the GHL_API_KEY scopes and GHL_LOCATION_ID."
            )
        if status == 404:
            text = (
                f"{subject[:1].upper()}{subject[1:]} not found: {self.identifiers(spec, values)}\n"
                f"The {subject} may have been deleted or the ID is incorrect."
            )
            if lookup:
                text += f"\nUse the {lookup} tool to find valid IDs."
            return text
        if status == 409:
            return (
                f"Conflict while running {spec.name}.\n"
                f"The {subject} already exists or is in a state that prevents this change."
            )
        if status in (400, 422):
            required = [n for n, f in spec.params.model_fields.items() if f.is_required()]
            text = f"Invalid request for {spec.name}.\nCommon causes: missing or malformed fields"
            if required:
                text += f" (required: {', '.join(required)})"
            return text + ", IDs from another location, or wrong date/number formats."
        return None

    def describe_error(self, spec: ToolSpec, values: dict, error) -> GHLToolError:
        status = error.status_code if error else None
        message = error.message if error else "Unknown error"

        text = None
        for candidate in spec.hints:
            if candidate.matches(status, message):
                text = render(candidate.text, values, ids=self.identifiers(spec, values))
                break
        if text is None:
            text = self.default_guidance(spec, values, status)

        logger.warning(f"GHL tool {spec.name} failed with status {status}: {message}")
        if text:
            return GHLToolError(f"{text}\n\nOriginal error: {message}", status_code=status, tool=spec.name)
        return GHLToolError(f"Failed to {spec.action}: {message}", status_code=status, tool=spec.name)
