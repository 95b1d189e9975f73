# src/dcsim_core/analysis/classifier.py
"""
Decides whether a circuit can take the linear DC path.

The decision depends only on the multiset of component type tags. Circuits
that are not eligible belong to the transient path, which lives outside this
package.
"""
import logging
from dataclasses import dataclass
from typing import Tuple

from ..components.base_enums import ComponentKind
from ..components.catalog import DC_ELIGIBLE_KINDS
from ..data_structures import Circuit
from ..validation import IssueCode, IssueCollector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CircuitClassification:
    """Eligibility of one circuit, with the ids of the components that block it."""
    dc_eligible: bool
    blocking_components: Tuple[str, ...] = ()


def is_dc_eligible(circuit: Circuit) -> bool:
    return classify_circuit(circuit).dc_eligible


def classify_circuit(circuit: Circuit) -> CircuitClassification:
    """Unknown type tags are also blocking; the resolver reports them as schema errors."""
    blocking = tuple(
        comp.id for comp in circuit.components
        if ComponentKind.from_tag(comp.type) not in DC_ELIGIBLE_KINDS
    )
    if blocking:
        logger.debug(f"Circuit '{circuit.name}' is not DC-eligible; blocked by {list(blocking)}.")
    return CircuitClassification(dc_eligible=not blocking, blocking_components=blocking)


def require_dc_eligible(circuit: Circuit):
    """The classifier gate. Raises EligibilityError naming every blocking component."""
    classification = classify_circuit(circuit)
    if classification.dc_eligible:
        return
    issues = IssueCollector()
    comp_map = circuit.component_map
    for comp_id in classification.blocking_components:
        issues.error(IssueCode.DC_INELIGIBLE, component=comp_id, component_type=comp_map[comp_id].type)
    issues.raise_if_errors()
