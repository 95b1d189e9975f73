# tests/test_components.py
import math

import pytest

from dcsim_core.analysis import classify_circuit, is_dc_eligible
from dcsim_core.components import (
    COMPONENT_SCHEMAS, DC_ELIGIBLE_KINDS, ComponentKind, CurrentProbe, Marker, Resistor, Vccs,
    VoltageSource, get_schema, instantiate_elements,
)
from dcsim_core.validation import EligibilityError, IssueCode, SchemaError
from tests.conftest import DIVIDER_DEF, make_circuit


class TestComponentCatalog:

    def test_every_kind_has_a_schema(self):
        assert set(COMPONENT_SCHEMAS) == set(ComponentKind)

    def test_dc_paths_use_declared_terminals(self):
        for kind, schema in COMPONENT_SCHEMAS.items():
            for term_a, term_b in schema.dc_paths:
                assert term_a in schema.terminals, kind
                assert term_b in schema.terminals, kind

    def test_reactive_kinds_are_not_dc_eligible(self):
        for kind in (ComponentKind.CAPACITOR, ComponentKind.INDUCTOR, ComponentKind.VSOURCE_AC, ComponentKind.ISOURCE_AC):
            assert kind not in DC_ELIGIBLE_KINDS

    def test_from_tag(self):
        assert ComponentKind.from_tag("ccvs") is ComponentKind.CCVS
        assert ComponentKind.from_tag("Resistor") is None
        assert get_schema(ComponentKind.CCCS).terminals == ("pos", "neg", "ctrl_p", "ctrl_n")


class TestInstantiateElements:

    def test_divider_elements(self, divider_circuit):
        elements = instantiate_elements(divider_circuit)
        assert elements == [
            VoltageSource(id="V1", pos="vin", neg="gnd", voltage=9.0),
            Resistor(id="R1", p="vin", n="n1", resistance=3000.0),
            Resistor(id="R2", p="n1", n="gnd", resistance=6000.0),
        ]
        assert elements[1].conductance == pytest.approx(1.0 / 3000.0)

    def test_probe_and_marker_variants(self):
        circuit = make_circuit(DIVIDER_DEF + [
            ("A1", "current_probe", {}, {"p": "n1", "n": "n1"}),
            ("P1", "voltage_probe", {}, {"node": "n1"}),
            ("G1", "ground", {}, {"gnd": "gnd"}),
            ("G2", "vccs", {"gain": 1e-3}, {"pos": "n1", "neg": "gnd", "ctrl_p": "vin", "ctrl_n": "gnd"}),
        ])
        elements = {element.id: element for element in instantiate_elements(circuit)}
        assert elements["A1"] == CurrentProbe(id="A1", p="n1", n="n1")
        assert elements["P1"] == Marker(id="P1", kind=ComponentKind.VOLTAGE_PROBE, net="n1")
        assert elements["G1"] == Marker(id="G1", kind=ComponentKind.GROUND, net="gnd")
        assert isinstance(elements["G2"], Vccs)
        assert elements["G2"].gain == 1e-3

    def test_missing_parameter(self):
        circuit = make_circuit([("V1", "vsource_dc", {}, {"pos": "a", "neg": "gnd"})])
        with pytest.raises(SchemaError) as excinfo:
            instantiate_elements(circuit)
        assert excinfo.value.code == IssueCode.PARAM_MISSING.code
        assert excinfo.value.primary_issue.parameter == "dc"

    @pytest.mark.parametrize("value", [0.0, -10.0, math.nan, math.inf, "abc"])
    def test_invalid_resistance(self, value):
        circuit = make_circuit([("R1", "resistor", {"value": value}, {"p": "a", "n": "gnd"})])
        with pytest.raises(SchemaError) as excinfo:
            instantiate_elements(circuit)
        assert [issue.code for issue in excinfo.value.issues] == [IssueCode.PARAM_INVALID.code]

    def test_negative_source_values_are_allowed(self):
        circuit = make_circuit([("V1", "vsource_dc", {"dc": -3.0}, {"pos": "a", "neg": "gnd"})])
        assert instantiate_elements(circuit)[0].voltage == -3.0

    def test_ineligible_kind(self):
        circuit = make_circuit([("C1", "capacitor", {"value": 1e-6}, {"p": "a", "n": "gnd"})])
        with pytest.raises(EligibilityError) as excinfo:
            instantiate_elements(circuit)
        assert excinfo.value.code == IssueCode.DC_INELIGIBLE.code

    def test_all_errors_reported_together(self):
        circuit = make_circuit([
            ("R1", "resistor", {}, {"p": "a", "n": "gnd"}),
            ("R2", "resistor", {"value": 1.0}, {"p": "a"}),
            ("X1", "memristor", {}, {"p": "a", "n": "gnd"}),
        ])
        with pytest.raises(SchemaError) as excinfo:
            instantiate_elements(circuit)
        assert [issue.code for issue in excinfo.value.issues] == [
            IssueCode.PARAM_MISSING.code,
            IssueCode.COMP_TERMINAL_MISSING.code,
            IssueCode.COMP_TYPE_UNKNOWN.code,
        ]


class TestCircuitClassifier:

    def test_resistive_circuit_is_eligible(self, divider_circuit):
        classification = classify_circuit(divider_circuit)
        assert classification.dc_eligible
        assert classification.blocking_components == ()
        assert is_dc_eligible(divider_circuit)

    def test_reactive_and_unknown_components_block(self):
        circuit = make_circuit(DIVIDER_DEF + [
            ("C1", "capacitor", {"value": 1e-6}, {"p": "n1", "n": "gnd"}),
            ("V2", "vsource_ac", {"amplitude": 1.0, "frequency": 50.0}, {"pos": "vin", "neg": "gnd"}),
            ("Z1", "warp_core", {}, {"p": "n1", "n": "gnd"}),
        ])
        classification = classify_circuit(circuit)
        assert not classification.dc_eligible
        assert classification.blocking_components == ("C1", "V2", "Z1")

    def test_controlled_sources_are_eligible(self):
        circuit = make_circuit(DIVIDER_DEF + [
            ("F1", "cccs", {"gain": 2.0}, {"pos": "n1", "neg": "gnd", "ctrl_p": "vin", "ctrl_n": "gnd"}),
        ])
        assert is_dc_eligible(circuit)
