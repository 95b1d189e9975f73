# src/dcsim_core/parser/parser.py
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import cerberus
import yaml

from ..analysis.config import ConfigParsingError, DCSolverConfig, parse_solver_config
from ..components.base_enums import ComponentKind
from ..components.catalog import get_schema
from ..data_structures import Circuit, ComponentSpec, NetSpec, TheveninPort
from ..netlist.wiring import build_nets_from_wires, nets_from_connections
from ..units import to_si_magnitude
from ..validation import IssueCode, IssueCollector
from .exceptions import ParsingError, SchemaValidationError

logger = logging.getLogger(__name__)

#: Analysis methods a request may name.
ANALYSIS_METHODS = ("node_voltage", "branch_current", "thevenin", "transient")


@dataclass(frozen=True)
class ParsedRequest:
    """A validated solve request, ready for the analysis services."""
    circuit: Circuit
    method: Optional[str] = None
    thevenin_port: Optional[TheveninPort] = None
    teaching_mode: bool = False
    solver_config: DCSolverConfig = field(default_factory=DCSolverConfig)
    sim_settings: Dict[str, Any] = field(default_factory=dict)


class EnhancedValidator(cerberus.Validator):
    """Custom Cerberus validator adding a uniqueness rule over lists of mappings."""
    def __init__(self, *args, **kwargs):
        super(EnhancedValidator, self).__init__(*args, **kwargs)
        self.rules['unique_elements_by_key'] = {'schema': {'type': 'string'}}

    def _validate_unique_elements_by_key(self, key_for_uniqueness: str, field: str, value: List[Dict]):
        """
        Validates that all dictionaries in a list have a unique value for a given key.
        The rule's arguments are validated against this schema:
        {'type': 'string'}
        """
        if not isinstance(value, list):
            return  # Let the 'type: list' rule handle this.

        seen_keys = set()
        duplicates = []
        for item in value:
            if not isinstance(item, dict):
                continue  # Let sub-schema validation handle this.
            item_key = item.get(key_for_uniqueness)
            if item_key is not None:
                if item_key in seen_keys:
                    duplicates.append(item_key)
                else:
                    seen_keys.add(item_key)

        if duplicates:
            unique_duplicates = sorted(set(duplicates))
            self._error(field, f"Duplicate values found for key '{key_for_uniqueness}': {unique_duplicates}")


class RequestParser:
    """
    Validates the structure of a solve request and converts it into a
    `ParsedRequest`. Requests come as a mapping, a JSON/YAML string or a file.

    Nets are taken from `nets` when given, grouped from `wires` when given,
    and otherwise derived from the component connections.
    """
    _name_rule = {"type": "string", "required": True, "empty": False}
    _terminal_rule = {"type": "list", "items": [{"type": "string", "empty": False}, {"type": "string", "empty": False}]}

    _component_schema = {
        "id": _name_rule,
        "type": _name_rule,
        "label": {"type": "string", "required": False},
        "parameters": {
            "type": "dict", "required": False, "default": {},
            "keysrules": {"type": "string"},
            "valuesrules": {"type": ["number", "string"]},
        },
        "connections": {
            "type": "dict", "required": False, "default": {},
            "keysrules": {"type": "string", "empty": False},
            "valuesrules": {"type": "string", "empty": False},
        },
    }

    _schema = {
        "circuit_name": {"type": "string", "required": False, "empty": False},
        "components": {
            "type": "list", "required": True, "minlength": 1, "unique_elements_by_key": "id",
            "schema": {"type": "dict", "schema": _component_schema},
        },
        "nets": {
            "type": "list", "required": False, "excludes": "wires", "unique_elements_by_key": "name",
            "schema": {"type": "dict", "schema": {
                "name": _name_rule,
                "nodes": {"type": "list", "required": True, "schema": _terminal_rule},
            }},
        },
        "wires": {
            "type": "list", "required": False, "excludes": "nets",
            "schema": {"type": "list", "items": [_terminal_rule, _terminal_rule]},
        },
        "method": {"type": "string", "required": False, "nullable": True},
        "thevenin_port": {
            "type": "dict", "required": False, "nullable": True, "schema": {
                "positive": _name_rule,
                "negative": {"type": "string", "required": False, "nullable": True, "empty": False},
            },
        },
        "teaching_mode": {"type": "boolean", "required": False, "default": False},
        "solver": {"type": "dict", "required": False, "nullable": True},
        "sim": {
            "type": "dict", "required": False, "nullable": True, "allow_unknown": True, "schema": {
                "t_stop": {"type": "number", "min": 0},
                "n_samples": {"type": "integer", "min": 2},
            },
        },
    }

    def __init__(self):
        self._validator = EnhancedValidator(self._schema)
        self._validator.allow_unknown = False
        logger.debug("RequestParser initialized with strict structural validation rules.")

    # --- Sources ---

    def parse_file(self, path: Union[str, Path]) -> ParsedRequest:
        """Parses a request stored as JSON or YAML."""
        source = Path(path).resolve()
        logger.info(f"Parsing simulation request from file: {source}")
        if not source.is_file():
            raise ParsingError(details=f"Request file not found at path: {source}", source=source)
        try:
            text = source.read_text(encoding="utf-8")
        except (PermissionError, UnicodeDecodeError) as e:
            raise ParsingError(details=f"Could not read file: {e}", source=source) from e
        return self.parse_text(text, source=source)

    def parse_text(self, text: str, source: Optional[Path] = None) -> ParsedRequest:
        """Parses a JSON or YAML document (JSON is tried first)."""
        try:
            content = json.loads(text)
        except json.JSONDecodeError:
            try:
                content = yaml.safe_load(text)
            except yaml.YAMLError as e:
                raise ParsingError(details=f"Invalid JSON/YAML syntax: {e}", source=source) from e
        if content is None:
            raise ParsingError(details="The request is empty or contains no valid content.", source=source)
        return self.parse(content, source=source)

    def parse(self, payload: Any, source: Optional[Path] = None) -> ParsedRequest:
        """
        Validates a request mapping and builds the `ParsedRequest`.

        Raises:
            ParsingError: The payload is not a mapping.
            SchemaValidationError: The payload does not match the request schema,
                                   or its solver configuration is invalid.
            SchemaError: A parameter value cannot be converted, or the method is unknown.
            TopologyError: Wires reference unknown components or terminals.
        """
        if not isinstance(payload, dict):
            raise ParsingError(details="The root of the request must be a mapping.", source=source)
        if not self._validator.validate(payload):
            raise SchemaValidationError(self._validator.errors, source)
        document = self._validator.document

        issues = IssueCollector()
        method = document.get("method")
        if method is not None and method not in ANALYSIS_METHODS:
            issues.error(IssueCode.REQ_METHOD_UNKNOWN, method=method, available_methods=", ".join(ANALYSIS_METHODS))
        port_raw = document.get("thevenin_port")
        if method == "thevenin" and not port_raw:
            issues.error(IssueCode.REQ_PORT_MISSING)

        components = [self._build_component(raw, issues) for raw in document["components"]]
        issues.raise_if_errors()

        try:
            solver_config = parse_solver_config(document.get("solver"))
        except ConfigParsingError as e:
            raise SchemaValidationError({"solver": [str(e)]}, source) from e

        if "wires" in document:
            wires = [tuple(tuple(endpoint) for endpoint in wire) for wire in document["wires"]]
            components, nets = build_nets_from_wires(components, wires)
        elif "nets" in document:
            nets = [NetSpec(name=net["name"], nodes=net["nodes"]) for net in document["nets"]]
        else:
            nets = nets_from_connections(components)

        circuit = Circuit(
            components=tuple(components),
            nets=tuple(nets),
            name=document.get("circuit_name", "circuit"),
        )
        port = TheveninPort(port_raw["positive"], port_raw.get("negative")) if port_raw else None

        logger.debug(
            f"Parsed request for '{circuit.name}': {len(circuit.components)} component(s), "
            f"{len(circuit.nets)} net(s), method {method!r}."
        )
        return ParsedRequest(
            circuit=circuit,
            method=method,
            thevenin_port=port,
            teaching_mode=document.get("teaching_mode", False),
            solver_config=solver_config,
            sim_settings=dict(document.get("sim") or {}),
        )

    @staticmethod
    def _build_component(raw: Dict[str, Any], issues: IssueCollector) -> ComponentSpec:
        """
        Converts the catalogued parameters of a known component type to SI
        floats; parameters the type does not declare are ignored. Components of
        unknown type keep their raw numeric parameters for the resolver to reject.
        """
        kind = ComponentKind.from_tag(raw["type"])
        parameters: Dict[str, float] = {}
        raw_params = raw.get("parameters", {})

        if kind is None:
            parameters = {k: v for k, v in raw_params.items() if isinstance(v, (int, float))}
        else:
            for param_name, unit in get_schema(kind).parameters.items():
                if param_name not in raw_params:
                    continue
                try:
                    parameters[param_name] = to_si_magnitude(raw_params[param_name], unit)
                except ValueError as e:
                    issues.error(
                        IssueCode.PARAM_INVALID, component=raw["id"], parameter=param_name,
                        value=repr(raw_params[param_name]), reason=str(e)
                    )

        return ComponentSpec(
            id=raw["id"],
            type=raw["type"],
            parameters=parameters,
            connections=dict(raw.get("connections", {})),
        )
