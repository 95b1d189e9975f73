# src/dcsim_core/validation/issue_codes.py
import logging
from enum import Enum

from .issues import ErrorCategory

logger = logging.getLogger(__name__)


class IssueCode(Enum):
    """
    Registry of issue codes, their category and their message templates.
    Each enum member's value is a tuple: (code_str, category, message_template_str).
    """

    # --- Net Topology Issues (NET_...) ---
    NET_MEMBERS_MIN = ("NET_MEMBERS_MIN", ErrorCategory.TOPOLOGY, "Net '{net}' has {count} member(s); at least 2 terminals are required.")
    NET_DUPLICATE = ("NET_DUPLICATE", ErrorCategory.TOPOLOGY, "Net '{net}' is declared more than once.")
    NET_UNKNOWN_COMPONENT = ("NET_UNKNOWN_COMPONENT", ErrorCategory.TOPOLOGY, "Net '{net}' references unknown component '{component}'.")
    NET_UNKNOWN_TERMINAL = ("NET_UNKNOWN_TERMINAL", ErrorCategory.TOPOLOGY, "Net '{net}' references terminal '{terminal}', which component '{component}' ({component_type}) does not declare.")
    NET_TERMINAL_REUSED = ("NET_TERMINAL_REUSED", ErrorCategory.TOPOLOGY, "Terminal '{terminal}' of component '{component}' appears in more than one net: {nets}.")
    NET_FLOATING = ("NET_FLOATING", ErrorCategory.TOPOLOGY, "Net '{net}' has no conductive path to ground net '{ground_net}'; its potential is not uniquely defined.")

    # --- Wire Issues (WIRE_...) ---
    WIRE_UNKNOWN_COMPONENT = ("WIRE_UNKNOWN_COMPONENT", ErrorCategory.TOPOLOGY, "Wire {wire} references unknown component '{component}'.")
    WIRE_UNKNOWN_TERMINAL = ("WIRE_UNKNOWN_TERMINAL", ErrorCategory.TOPOLOGY, "Wire {wire} references terminal '{terminal}', which component '{component}' ({component_type}) does not declare.")

    # --- Component Connection Issues (COMP_...) ---
    COMP_DUPLICATE_ID = ("COMP_DUPLICATE_ID", ErrorCategory.TOPOLOGY, "Component id '{component}' is used more than once.")
    COMP_UNDECLARED_NET = ("COMP_UNDECLARED_NET", ErrorCategory.TOPOLOGY, "Component '{component}' connects terminal '{terminal}' to undeclared net '{net}'.")
    COMP_CONNECTION_MISMATCH = ("COMP_CONNECTION_MISMATCH", ErrorCategory.TOPOLOGY, "Component '{component}' connects terminal '{terminal}' to net '{net}', but the net declarations place it on {member_net}.")
    COMP_TYPE_UNKNOWN = ("COMP_TYPE_UNKNOWN", ErrorCategory.SCHEMA, "Component '{component}' has unknown type '{component_type}'. Available types: {available_types}.")
    COMP_TERMINAL_MISSING = ("COMP_TERMINAL_MISSING", ErrorCategory.SCHEMA, "Component '{component}' ({component_type}) has no connection for required terminal '{terminal}'.")
    COMP_TERMINAL_UNDECLARED = ("COMP_TERMINAL_UNDECLARED", ErrorCategory.SCHEMA, "Component '{component}' ({component_type}) connects undeclared terminal '{terminal}'. Declared terminals: {declared_terminals}.")

    # --- Ground Issues (GND_...) ---
    GND_MISSING = ("GND_MISSING", ErrorCategory.TOPOLOGY, "The circuit has no ground: no net is named '{ground_name}' and no ground component is connected.")
    GND_AMBIGUOUS = ("GND_AMBIGUOUS", ErrorCategory.TOPOLOGY, "Ground is ambiguous: candidate nets {candidates} disagree.")

    # --- Thevenin Port Issues (PORT_...) ---
    PORT_UNKNOWN_NET = ("PORT_UNKNOWN_NET", ErrorCategory.TOPOLOGY, "Thevenin port terminal '{terminal}' refers to undeclared net '{net}'.")
    PORT_DEGENERATE = ("PORT_DEGENERATE", ErrorCategory.TOPOLOGY, "Both Thevenin port terminals sit on net '{net}'; a port needs two distinct nets.")

    # --- Parameter Issues (PARAM_...) ---
    PARAM_MISSING = ("PARAM_MISSING", ErrorCategory.SCHEMA, "Component '{component}' ({component_type}) is missing required parameter '{parameter}'.")
    PARAM_INVALID = ("PARAM_INVALID", ErrorCategory.SCHEMA, "Component '{component}' parameter '{parameter}' has invalid value {value}: {reason}.")

    # --- Request Issues (REQ_...) ---
    REQ_METHOD_UNKNOWN = ("REQ_METHOD_UNKNOWN", ErrorCategory.SCHEMA, "Analysis method '{method}' is not supported. Available methods: {available_methods}.")
    REQ_PORT_MISSING = ("REQ_PORT_MISSING", ErrorCategory.SCHEMA, "Analysis method 'thevenin' requires a 'thevenin_port' with a 'positive' net.")

    # --- DC Path Eligibility Issues (DC_...) ---
    DC_INELIGIBLE = ("DC_INELIGIBLE", ErrorCategory.ELIGIBILITY, "Component '{component}' of type '{component_type}' is not supported by the linear DC path.")
    DC_TRANSIENT_UNAVAILABLE = ("DC_TRANSIENT_UNAVAILABLE", ErrorCategory.ELIGIBILITY, "The circuit requires transient analysis ('{method}'), but no transient solver is configured.")

    # --- Numerical Information (MNA_...) ---
    MNA_DUPLICATE_BRANCH = ("MNA_DUPLICATE_BRANCH", ErrorCategory.NUMERICAL, "Voltage-defining branches {branches} share the node pair ({net_a}, {net_b}); regularized with epsilon {epsilon:.3e}.")
    MNA_SHORTED_BRANCH = ("MNA_SHORTED_BRANCH", ErrorCategory.NUMERICAL, "Voltage-defining branch '{branch}' has both ends on net '{net}'; regularized with epsilon {epsilon:.3e}, so its reported current is not physical unless its voltage is zero.")
    MNA_REFERENCE_REUSED = ("MNA_REFERENCE_REUSED", ErrorCategory.NUMERICAL, "Controlled source '{component}' senses the current of existing branch '{branch}' (sign {sign:+d}).")
    MNA_REFERENCE_SYNTHESIZED = ("MNA_REFERENCE_SYNTHESIZED", ErrorCategory.NUMERICAL, "Controlled source '{component}' senses its control current through a synthetic zero-volt branch between '{net_a}' and '{net_b}'.")
    MNA_SOLVER_FALLBACK = ("MNA_SOLVER_FALLBACK", ErrorCategory.NUMERICAL, "The MNA matrix is singular; the solution was obtained with the '{method}' stage.")

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def category(self) -> ErrorCategory:
        return self.value[1]

    @property
    def template(self) -> str:
        return self.value[2]

    def format_message(self, **kwargs) -> str:
        """Formats the message template with provided keyword arguments."""
        try:
            return self.template.format(**kwargs)
        except KeyError as e:
            logger.error(f"Missing key {e} for formatting message template of {self.name} (code: {self.code}): '{self.template}'. Provided args: {kwargs}")
            return f"Error formatting message for {self.code}: Missing key {e}. Template: '{self.template}' Args: {kwargs}"
