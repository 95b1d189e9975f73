# tests/test_dc_analyzer.py
import pytest
import numpy as np

from dcsim_core import DCAnalyzer, DCSolverConfig
from dcsim_core.analysis import DCAnalysisError, SolveMethod
from dcsim_core.analysis.mna import Reused, Synthesized
from dcsim_core.validation import EligibilityError, IssueCode, TopologyError
from tests.conftest import DIVIDER_DEF, assert_kcl, make_circuit


def _issue_codes(solution):
    return [issue.code for issue in solution.issues]


class TestDCAnalyzer:

    def test_voltage_divider(self, divider_circuit):
        solution = DCAnalyzer(divider_circuit).analyze()

        assert solution.solve_method is SolveMethod.DIRECT
        assert solution.node_voltages["n1"] == pytest.approx(6.0)
        assert solution.node_voltages["vin"] == pytest.approx(9.0)
        assert solution.node_voltages["gnd"] == 0.0
        assert solution.branch_currents["R1"] == pytest.approx(1e-3)
        assert solution.branch_currents["R2"] == pytest.approx(1e-3)
        # The source delivers current out of its positive terminal.
        assert solution.branch_currents["V1"] == pytest.approx(-1e-3)
        assert_kcl(solution)

    def test_to_dict_shape(self, divider_circuit):
        data = DCAnalyzer(divider_circuit).analyze().to_dict()
        assert set(data) == {"node_voltages", "branch_currents"}
        assert set(data["branch_currents"]) == {"V1", "R1", "R2"}

    def test_superposition(self):
        def solve(v_dc, i_dc):
            circuit = make_circuit([
                ("V1", "vsource_dc", {"dc": v_dc}, {"pos": "vin", "neg": "gnd"}),
                ("R1", "resistor", {"value": 1000.0}, {"p": "vin", "n": "n1"}),
                ("R2", "resistor", {"value": 1000.0}, {"p": "n1", "n": "gnd"}),
                ("I1", "isource_dc", {"dc": i_dc}, {"pos": "gnd", "neg": "n1"}),
            ])
            return DCAnalyzer(circuit).analyze()

        both = solve(10.0, 1e-3)
        v_only = solve(10.0, 0.0)
        i_only = solve(0.0, 1e-3)

        assert both.node_voltages["n1"] == pytest.approx(5.5)
        for net in ("vin", "n1"):
            assert both.node_voltages[net] == pytest.approx(v_only.node_voltages[net] + i_only.node_voltages[net])
        for comp_id in ("V1", "R1", "R2"):
            assert both.branch_currents[comp_id] == pytest.approx(
                v_only.branch_currents[comp_id] + i_only.branch_currents[comp_id]
            )
        assert both.branch_currents["I1"] == pytest.approx(1e-3)
        assert_kcl(both)

    def test_repeated_solves_are_identical(self, divider_circuit):
        first = DCAnalyzer(divider_circuit).analyze()
        second = DCAnalyzer(divider_circuit).analyze()
        assert first.node_voltages == second.node_voltages
        assert first.branch_currents == second.branch_currents
        assert first.solve_method is second.solve_method

    def test_ground_only_circuit(self):
        circuit = make_circuit([("R1", "resistor", {"value": 100.0}, {"p": "gnd", "n": "gnd"})])
        solution = DCAnalyzer(circuit).analyze()
        assert solution.node_voltages == {"gnd": 0.0}
        assert solution.branch_currents == {"R1": 0.0}
        assert solution.solve_method is SolveMethod.DIRECT

    def test_ground_component_names_the_reference_net(self):
        circuit = make_circuit([
            ("V1", "vsource_dc", {"dc": 3.0}, {"pos": "vin", "neg": "0"}),
            ("R1", "resistor", {"value": 1000.0}, {"p": "vin", "n": "0"}),
            ("G1", "ground", {}, {"gnd": "0"}),
        ])
        solution = DCAnalyzer(circuit).analyze()
        assert solution.node_voltages["0"] == 0.0
        assert solution.node_voltages["gnd"] == 0.0
        assert solution.node_voltages["vin"] == pytest.approx(3.0)
        assert "G1" not in solution.branch_currents

    def test_ineligible_component_rejected(self):
        circuit = make_circuit(DIVIDER_DEF + [
            ("C1", "capacitor", {"value": 1e-6}, {"p": "n1", "n": "gnd"}),
        ])
        with pytest.raises(EligibilityError) as excinfo:
            DCAnalyzer(circuit).analyze()
        assert excinfo.value.code == IssueCode.DC_INELIGIBLE.code
        assert excinfo.value.primary_issue.component == "C1"

    def test_topology_error_propagates(self):
        circuit = make_circuit([
            ("V1", "vsource_dc", {"dc": 1.0}, {"pos": "a", "neg": "b"}),
            ("R1", "resistor", {"value": 1.0}, {"p": "a", "n": "b"}),
        ])
        with pytest.raises(TopologyError) as excinfo:
            DCAnalyzer(circuit).analyze()
        assert excinfo.value.code == IssueCode.GND_MISSING.code

    def test_requires_circuit(self):
        with pytest.raises(TypeError):
            DCAnalyzer({"components": []})

    def test_unexpected_failure_is_wrapped(self, divider_circuit, monkeypatch):
        def broken_solve(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr("dcsim_core.analysis.dc.solve_mna_system", broken_solve)
        with pytest.raises(DCAnalysisError) as excinfo:
            DCAnalyzer(divider_circuit).analyze()
        assert "boom" in str(excinfo.value)
        assert "DC Analysis Error" in excinfo.value.get_diagnostic_report()


class TestDegenerateCircuits:

    def test_self_shorted_resistor_is_harmless(self):
        circuit = make_circuit(DIVIDER_DEF + [("R3", "resistor", {"value": 10.0}, {"p": "n1", "n": "n1"})])
        solution = DCAnalyzer(circuit).analyze()
        assert solution.node_voltages["n1"] == pytest.approx(6.0)
        assert solution.branch_currents["R3"] == 0.0

    def test_self_shorted_voltage_source_is_regularized(self):
        circuit = make_circuit(DIVIDER_DEF + [("V2", "vsource_dc", {"dc": 5.0}, {"pos": "n1", "neg": "n1"})])
        solution = DCAnalyzer(circuit).analyze()

        assert solution.solve_method is SolveMethod.DIRECT
        assert solution.node_voltages["n1"] == pytest.approx(6.0, rel=1e-12)
        assert solution.node_voltages["vin"] == pytest.approx(9.0, rel=1e-12)
        assert solution.system.regularization_epsilon == pytest.approx(1e-12)
        assert solution.branch_currents["V2"] == pytest.approx(5.0 / 1e-12)
        codes = _issue_codes(solution)
        assert IssueCode.MNA_SHORTED_BRANCH.code in codes
        assert IssueCode.MNA_SOLVER_FALLBACK.code not in codes

    def test_self_shorted_current_probe_reads_zero(self):
        circuit = make_circuit(DIVIDER_DEF + [("A1", "current_probe", {}, {"p": "n1", "n": "n1"})])
        solution = DCAnalyzer(circuit).analyze()
        assert solution.solve_method is SolveMethod.DIRECT
        assert solution.branch_currents["A1"] == 0.0
        assert solution.node_voltages["n1"] == pytest.approx(6.0, rel=1e-12)

    @pytest.mark.parametrize("shunt, divider", [(1e-6, 1e10), (1e-3, 1e13), (1e-6, 1e12)])
    def test_badly_scaled_circuit_is_solved_directly(self, shunt, divider):
        circuit = make_circuit([
            ("V1", "vsource_dc", {"dc": 1.0}, {"pos": "vin", "neg": "gnd"}),
            ("RS", "resistor", {"value": shunt}, {"p": "vin", "n": "gnd"}),
            ("R1", "resistor", {"value": divider}, {"p": "vin", "n": "n1"}),
            ("R2", "resistor", {"value": divider}, {"p": "n1", "n": "gnd"}),
        ])
        solution = DCAnalyzer(circuit).analyze()

        assert solution.solve_method is SolveMethod.DIRECT
        assert solution.node_voltages["n1"] == pytest.approx(0.5, rel=1e-9)
        assert solution.branch_currents["RS"] == pytest.approx(1.0 / shunt, rel=1e-9)
        assert IssueCode.MNA_SOLVER_FALLBACK.code not in _issue_codes(solution)

    def test_floating_island_warns_and_solves(self):
        circuit = make_circuit(DIVIDER_DEF + [
            ("R3", "resistor", {"value": 1000.0}, {"p": "i1", "n": "i2"}),
            ("R4", "resistor", {"value": 1000.0}, {"p": "i1", "n": "i2"}),
        ])
        solution = DCAnalyzer(circuit).analyze()

        floating = [issue.net for issue in solution.issues if issue.code == IssueCode.NET_FLOATING.code]
        assert sorted(floating) == ["i1", "i2"]
        assert solution.solve_method is not SolveMethod.DIRECT
        assert all(np.isfinite(v) for v in solution.node_voltages.values())
        assert solution.node_voltages["n1"] == pytest.approx(6.0, rel=1e-6)

    def test_parallel_voltage_sources_share_current(self):
        circuit = make_circuit([
            ("V1", "vsource_dc", {"dc": 5.0}, {"pos": "n1", "neg": "gnd"}),
            ("V2", "vsource_dc", {"dc": 5.0}, {"pos": "n1", "neg": "gnd"}),
            ("R1", "resistor", {"value": 1000.0}, {"p": "n1", "n": "gnd"}),
        ])
        solution = DCAnalyzer(circuit).analyze()

        assert solution.node_voltages["n1"] == pytest.approx(5.0)
        total = solution.branch_currents["V1"] + solution.branch_currents["V2"]
        assert total == pytest.approx(-5e-3, abs=1e-9)
        assert IssueCode.MNA_DUPLICATE_BRANCH.code in _issue_codes(solution)
        assert solution.system.regularization_epsilon == pytest.approx(1e-12)

    def test_regularization_scales_with_stiffest_conductance(self):
        components = [
            ("V1", "vsource_dc", {"dc": 1.0}, {"pos": "n1", "neg": "gnd"}),
            ("V2", "vsource_dc", {"dc": 1.0}, {"pos": "n1", "neg": "gnd"}),
            ("R1", "resistor", {"value": 1e-3}, {"p": "n1", "n": "gnd"}),
        ]
        scaled = DCAnalyzer(make_circuit(components)).analyze()
        assert scaled.system.regularization_epsilon == pytest.approx(1e-15)

        fixed = DCAnalyzer(make_circuit(components), DCSolverConfig(scale_aware_regularization=False)).analyze()
        assert fixed.system.regularization_epsilon == pytest.approx(1e-12)

    def test_no_duplicates_means_no_regularization(self, divider_circuit):
        solution = DCAnalyzer(divider_circuit).analyze()
        assert solution.system.regularization_epsilon is None
        assert IssueCode.MNA_DUPLICATE_BRANCH.code not in _issue_codes(solution)


class TestControlledSources:

    def test_vcvs_amplifies_control_voltage(self):
        circuit = make_circuit([
            ("V1", "vsource_dc", {"dc": 1.0}, {"pos": "nin", "neg": "gnd"}),
            ("E1", "vcvs", {"gain": 10.0}, {"pos": "nout", "neg": "gnd", "ctrl_p": "nin", "ctrl_n": "gnd"}),
            ("RL", "resistor", {"value": 1000.0}, {"p": "nout", "n": "gnd"}),
        ])
        solution = DCAnalyzer(circuit).analyze()
        assert solution.node_voltages["nout"] == pytest.approx(10.0)
        assert solution.branch_currents["E1"] == pytest.approx(-0.01)
        assert_kcl(solution)

    def test_vccs_drives_load(self):
        circuit = make_circuit([
            ("V1", "vsource_dc", {"dc": 2.0}, {"pos": "nin", "neg": "gnd"}),
            ("G1", "vccs", {"gain": 1e-3}, {"pos": "nout", "neg": "gnd", "ctrl_p": "nin", "ctrl_n": "gnd"}),
            ("RL", "resistor", {"value": 1000.0}, {"p": "nout", "n": "gnd"}),
        ])
        solution = DCAnalyzer(circuit).analyze()
        assert solution.node_voltages["nout"] == pytest.approx(-2.0)
        assert solution.branch_currents["G1"] == pytest.approx(2e-3)
        assert_kcl(solution)

    def test_cccs_with_synthesized_sensing_branch(self):
        circuit = make_circuit([
            ("V1", "vsource_dc", {"dc": 1.0}, {"pos": "nin", "neg": "gnd"}),
            ("R1", "resistor", {"value": 1000.0}, {"p": "nin", "n": "nc"}),
            ("F1", "cccs", {"gain": 2.0}, {"pos": "nout", "neg": "gnd", "ctrl_p": "nc", "ctrl_n": "gnd"}),
            ("RL", "resistor", {"value": 1000.0}, {"p": "nout", "n": "gnd"}),
        ])
        solution = DCAnalyzer(circuit).analyze()

        assert isinstance(solution.system.references["F1"], Synthesized)
        assert solution.control_currents["F1"] == pytest.approx(1e-3)
        assert solution.branch_currents["F1"] == pytest.approx(2e-3)
        assert solution.node_voltages["nc"] == pytest.approx(0.0, abs=1e-12)
        assert solution.node_voltages["nout"] == pytest.approx(-2.0)
        # The sensing branch is internal.
        assert set(solution.branch_currents) == {"V1", "R1", "F1", "RL"}
        assert IssueCode.MNA_REFERENCE_SYNTHESIZED.code in _issue_codes(solution)
        assert_kcl(solution)

    @pytest.mark.parametrize("ctrl_p, ctrl_n, sign, v_out", [
        ("nin", "gnd", 1, -0.5),
        ("gnd", "nin", -1, 0.5),
    ])
    def test_ccvs_reuses_source_branch(self, ctrl_p, ctrl_n, sign, v_out):
        circuit = make_circuit([
            ("V1", "vsource_dc", {"dc": 5.0}, {"pos": "nin", "neg": "gnd"}),
            ("R1", "resistor", {"value": 1000.0}, {"p": "nin", "n": "gnd"}),
            ("H1", "ccvs", {"gain": 100.0}, {"pos": "nout", "neg": "gnd", "ctrl_p": ctrl_p, "ctrl_n": ctrl_n}),
            ("RL", "resistor", {"value": 1000.0}, {"p": "nout", "n": "gnd"}),
        ])
        solution = DCAnalyzer(circuit).analyze()

        reference = solution.system.references["H1"]
        assert reference == Reused(index=reference.index, sign=sign, branch_id="V1")
        assert solution.control_currents["H1"] == pytest.approx(-5e-3 * sign)
        assert solution.node_voltages["nout"] == pytest.approx(v_out)
        assert solution.branch_currents["H1"] == pytest.approx(-v_out / 1000.0)
        assert_kcl(solution)

    def test_ambiguous_control_pair_gets_sensing_branch(self):
        circuit = make_circuit([
            ("V1", "vsource_dc", {"dc": 5.0}, {"pos": "nin", "neg": "gnd"}),
            ("V2", "vsource_dc", {"dc": 5.0}, {"pos": "nin", "neg": "gnd"}),
            ("R1", "resistor", {"value": 1000.0}, {"p": "nin", "n": "gnd"}),
            ("H1", "ccvs", {"gain": 1.0}, {"pos": "nout", "neg": "gnd", "ctrl_p": "nin", "ctrl_n": "gnd"}),
            ("RL", "resistor", {"value": 1000.0}, {"p": "nout", "n": "gnd"}),
        ])
        solution = DCAnalyzer(circuit).analyze()
        assert isinstance(solution.system.references["H1"], Synthesized)
        assert all(np.isfinite(v) for v in solution.node_voltages.values())


class TestProbes:

    def test_current_probe_reports_series_current(self):
        circuit = make_circuit([
            ("V1", "vsource_dc", {"dc": 9.0}, {"pos": "vin", "neg": "gnd"}),
            ("A1", "current_probe", {}, {"p": "vin", "n": "va"}),
            ("R1", "resistor", {"value": 3000.0}, {"p": "va", "n": "n1"}),
            ("R2", "resistor", {"value": 6000.0}, {"p": "n1", "n": "gnd"}),
        ])
        solution = DCAnalyzer(circuit).analyze()
        assert solution.branch_currents["A1"] == pytest.approx(1e-3)
        assert solution.node_voltages["va"] == pytest.approx(9.0)
        assert_kcl(solution)

    def test_voltage_probe_reads_its_net(self):
        circuit = make_circuit(DIVIDER_DEF + [("P1", "voltage_probe", {}, {"node": "n1"})])
        solution = DCAnalyzer(circuit).analyze()
        assert solution.probe_voltages == {"P1": pytest.approx(6.0)}
        assert "P1" not in solution.branch_currents
