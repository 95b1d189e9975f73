# src/dcsim_core/analysis/mna.py
"""
Assembles the Modified Nodal Analysis system `A x = b` of a DC circuit.

Unknown layout: the first `n` entries of `x` are the voltages of the non-ground
nets in `NetIndex.node_names` order; the remaining `m` entries are the currents
of the voltage-defining branches. User branches (voltage sources, VCVS, CCVS and
current probes) come first in element order, followed by the zero-volt sensing
branches synthesized for current-controlled sources.

Every branch current follows the passive convention: positive when current
enters the branch at its first net (`pos`) and leaves at its second (`neg`).
Node rows are KCL equations written as "sum of currents leaving the node
through elements = current injected into the node".
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

import numpy as np
import scipy.sparse as sp

from ..components.elements import (
    CURRENT_CONTROLLED_TYPES, VOLTAGE_DEFINING_TYPES,
    Cccs, Ccvs, CurrentProbe, CurrentSource, DcElement, Marker,
    Resistor, Vccs, Vcvs, VoltageSource,
)
from ..errors import FrameworkLogicError
from ..netlist.resolver import NetIndex
from ..validation import IssueCode, IssueCollector, ValidationIssue
from .config import DCSolverConfig

logger = logging.getLogger(__name__)


# --- Reference-current bookkeeping for CCVS / CCCS ---

@dataclass(frozen=True)
class Reused:
    """The reference current is the unknown of an existing user branch, times `sign`."""
    index: int
    sign: int
    branch_id: str


@dataclass(frozen=True)
class Synthesized:
    """The reference current is the unknown of a private zero-volt sensing branch."""
    index: int

    @property
    def sign(self) -> int:
        return 1


BranchRef = Union[Reused, Synthesized]


@dataclass(frozen=True)
class Branch:
    """One branch-current unknown and the nets its constraint row spans."""
    owner: str
    pos: str
    neg: str
    index: int
    synthetic: bool = False

    @property
    def label(self) -> str:
        return f"sense:{self.owner}" if self.synthetic else self.owner

    @property
    def node_pair(self) -> FrozenSet[str]:
        return frozenset((self.pos, self.neg))


@dataclass(frozen=True)
class MnaSystem:
    """The assembled system plus everything needed to interpret its solution."""
    A: np.ndarray
    b: np.ndarray
    net_index: NetIndex
    elements: Tuple[DcElement, ...]
    branches: Tuple[Branch, ...]
    references: Dict[str, BranchRef]
    issues: Tuple[ValidationIssue, ...] = ()
    regularization_epsilon: Optional[float] = None
    _branch_by_owner: Dict[str, Branch] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(
            self, '_branch_by_owner', {br.owner: br for br in self.branches if not br.synthetic}
        )

    @property
    def size(self) -> int:
        return self.A.shape[0]

    @property
    def node_count(self) -> int:
        return self.net_index.node_count

    def branch_of(self, component_id: str) -> Branch:
        """The user branch owned by a voltage-defining component."""
        return self._branch_by_owner[component_id]

    def unknown_labels(self) -> List[str]:
        labels = [f"V({name})" for name in self.net_index.node_names]
        labels.extend(f"I({br.label})" for br in self.branches)
        return labels

    def equation_labels(self) -> List[str]:
        labels = [f"KCL({name})" for name in self.net_index.node_names]
        labels.extend(f"V({br.pos}) - V({br.neg}) constraint of {br.label}" for br in self.branches)
        return labels


# --- Stamping ---

class _Stamper:
    """Accumulates (row, col, value) triplets; entries on ground rows/columns are dropped."""

    def __init__(self, net_index: NetIndex, size: int):
        self.net_index = net_index
        self.size = size
        self.rows: List[int] = []
        self.cols: List[int] = []
        self.data: List[float] = []
        self.b = np.zeros(size, dtype=float)

    def node(self, net_name: str) -> Optional[int]:
        return self.net_index.index_of(net_name)

    def add(self, row: Optional[int], col: Optional[int], value: float):
        if row is None or col is None or value == 0.0:
            return
        self.rows.append(row)
        self.cols.append(col)
        self.data.append(value)

    def add_rhs(self, row: Optional[int], value: float):
        if row is not None:
            self.b[row] += value

    def conductance(self, net_a: str, net_b: str, g: float):
        a, b = self.node(net_a), self.node(net_b)
        self.add(a, a, g)
        self.add(b, b, g)
        self.add(a, b, -g)
        self.add(b, a, -g)

    def transconductance(self, out_pos: str, out_neg: str, ctrl_col_p: Optional[int], ctrl_col_n: Optional[int], g: float):
        """Current g * (x[ctrl_col_p] - x[ctrl_col_n]) leaving `out_pos` and entering `out_neg`."""
        p, n = self.node(out_pos), self.node(out_neg)
        self.add(p, ctrl_col_p, g)
        self.add(p, ctrl_col_n, -g)
        self.add(n, ctrl_col_p, -g)
        self.add(n, ctrl_col_n, g)

    def branch_incidence(self, pos: str, neg: str, k: int):
        """KCL coupling of branch k and the `V(pos) - V(neg)` part of its constraint row."""
        p, n = self.node(pos), self.node(neg)
        self.add(p, k, 1.0)
        self.add(n, k, -1.0)
        self.add(k, p, 1.0)
        self.add(k, n, -1.0)

    def to_dense(self) -> np.ndarray:
        # Duplicate coordinates are summed by the COO -> dense conversion.
        coo = sp.coo_matrix(
            (np.asarray(self.data, dtype=float), (np.asarray(self.rows, dtype=int), np.asarray(self.cols, dtype=int))),
            shape=(self.size, self.size),
        )
        return coo.toarray()


def _stamp(element: DcElement, st: _Stamper, branch_index: Dict[str, int], references: Dict[str, BranchRef]):
    """Writes the contribution of one element. Exhaustive over the `DcElement` union."""
    if isinstance(element, Resistor):
        st.conductance(element.p, element.n, element.conductance)

    elif isinstance(element, CurrentSource):
        st.add_rhs(st.node(element.pos), -element.current)
        st.add_rhs(st.node(element.neg), element.current)

    elif isinstance(element, VoltageSource):
        k = branch_index[element.id]
        st.branch_incidence(element.pos, element.neg, k)
        st.add_rhs(k, element.voltage)

    elif isinstance(element, CurrentProbe):
        st.branch_incidence(element.p, element.n, branch_index[element.id])

    elif isinstance(element, Vcvs):
        k = branch_index[element.id]
        st.branch_incidence(element.pos, element.neg, k)
        st.add(k, st.node(element.ctrl_p), -element.gain)
        st.add(k, st.node(element.ctrl_n), element.gain)

    elif isinstance(element, Vccs):
        st.transconductance(
            element.pos, element.neg, st.node(element.ctrl_p), st.node(element.ctrl_n), element.gain
        )

    elif isinstance(element, Ccvs):
        k = branch_index[element.id]
        ref = references[element.id]
        st.branch_incidence(element.pos, element.neg, k)
        st.add(k, ref.index, -element.gain * ref.sign)

    elif isinstance(element, Cccs):
        ref = references[element.id]
        p, n = st.node(element.pos), st.node(element.neg)
        st.add(p, ref.index, element.gain * ref.sign)
        st.add(n, ref.index, -element.gain * ref.sign)

    elif isinstance(element, Marker):
        pass

    else:
        raise FrameworkLogicError(
            f"No MNA stamp is defined for element type '{type(element).__name__}' (id '{getattr(element, 'id', '?')}')."
        )


def _branch_nets(element: DcElement) -> Tuple[str, str]:
    if isinstance(element, CurrentProbe):
        return element.p, element.n
    return element.pos, element.neg


class MnaSystemBuilder:
    """
    Builds the `MnaSystem` of a list of DC elements over a resolved `NetIndex`.

    The builder is single-use and holds no state between `build()` calls
    beyond its inputs.
    """

    def __init__(self, elements: Sequence[DcElement], net_index: NetIndex, config: Optional[DCSolverConfig] = None):
        self.elements: Tuple[DcElement, ...] = tuple(elements)
        self.net_index = net_index
        self.config = config or DCSolverConfig()

    def build(self) -> MnaSystem:
        issues = IssueCollector()
        n = self.net_index.node_count

        branches = self._allocate_user_branches(n)
        references = self._resolve_references(branches, issues)
        branches = tuple(branches)
        size = n + len(branches)

        st = _Stamper(self.net_index, size)
        branch_index = {br.owner: br.index for br in branches if not br.synthetic}
        for element in self.elements:
            _stamp(element, st, branch_index, references)
        for br in branches:
            if br.synthetic:
                st.branch_incidence(br.pos, br.neg, br.index)

        A = st.to_dense()
        epsilon = self._regularize_duplicates(A, n, branches, issues)

        logger.debug(
            f"Assembled MNA system of size {size} ({n} node voltage(s), {len(branches)} branch current(s))."
        )
        return MnaSystem(
            A=A,
            b=st.b,
            net_index=self.net_index,
            elements=self.elements,
            branches=branches,
            references=references,
            issues=tuple(issues.issues),
            regularization_epsilon=epsilon,
        )

    def _allocate_user_branches(self, node_count: int) -> List[Branch]:
        branches: List[Branch] = []
        for element in self.elements:
            if isinstance(element, VOLTAGE_DEFINING_TYPES):
                pos, neg = _branch_nets(element)
                branches.append(Branch(owner=element.id, pos=pos, neg=neg, index=node_count + len(branches)))
        return branches

    def _resolve_references(self, branches: List[Branch], issues: IssueCollector) -> Dict[str, BranchRef]:
        """
        Picks the reference-current unknown of every CCVS/CCCS. A user branch on
        the control net pair is reused only when it is the single candidate;
        otherwise the source gets its own sensing branch from ctrl_p to ctrl_n.
        Sensing branches are appended to `branches`.
        """
        user_branches = list(branches)
        references: Dict[str, BranchRef] = {}

        for element in self.elements:
            if not isinstance(element, CURRENT_CONTROLLED_TYPES):
                continue
            control_pair = frozenset((element.ctrl_p, element.ctrl_n))
            candidates = [br for br in user_branches if br.node_pair == control_pair and br.owner != element.id]

            if len(candidates) == 1:
                chosen = candidates[0]
                sign = 1 if chosen.pos == element.ctrl_p else -1
                references[element.id] = Reused(index=chosen.index, sign=sign, branch_id=chosen.owner)
                issues.info(IssueCode.MNA_REFERENCE_REUSED, component=element.id, branch=chosen.owner, sign=sign)
                logger.debug(f"'{element.id}' reuses the current of branch '{chosen.owner}' (sign {sign:+d}).")
                continue

            sensing = Branch(
                owner=element.id, pos=element.ctrl_p, neg=element.ctrl_n,
                index=self.net_index.node_count + len(branches), synthetic=True,
            )
            branches.append(sensing)
            references[element.id] = Synthesized(index=sensing.index)
            issues.info(
                IssueCode.MNA_REFERENCE_SYNTHESIZED, component=element.id,
                net_a=element.ctrl_p, net_b=element.ctrl_n
            )
            logger.debug(
                f"'{element.id}' gets a sensing branch between '{element.ctrl_p}' and '{element.ctrl_n}' "
                f"({len(candidates)} candidate branch(es) found)."
            )

        if any(element.id not in references for element in self.elements if isinstance(element, CURRENT_CONTROLLED_TYPES)):
            raise FrameworkLogicError("A current-controlled source was left without a reference branch.")
        return references

    def _duplicate_epsilon(self, A: np.ndarray, node_count: int) -> float:
        """
        Perturbation for duplicate branches. When scale-aware, it shrinks in
        proportion to the stiffest conductance of the node block so that it
        stays negligible next to every physical series resistance.
        """
        epsilon = self.config.regularization_epsilon
        if not self.config.scale_aware_regularization or node_count == 0:
            return epsilon
        g_max = float(np.max(np.abs(np.diag(A)[:node_count])))
        if g_max > 1.0:
            epsilon = epsilon / g_max
        return epsilon

    def _regularize_duplicates(
        self, A: np.ndarray, node_count: int, branches: Tuple[Branch, ...], issues: IssueCollector
    ) -> Optional[float]:
        """
        Adds epsilon to the diagonal of every branch whose constraint row would
        otherwise be linearly dependent: all but the first of a group sharing a
        node pair, and every branch whose two ends sit on the same net.
        """
        groups: Dict[FrozenSet[str], List[Branch]] = defaultdict(list)
        for br in branches:
            groups[br.node_pair].append(br)

        shorted = [br for br in branches if br.pos == br.neg]
        duplicate_groups = [group for group in groups.values() if len(group) > 1 and group[0].pos != group[0].neg]
        if not shorted and not duplicate_groups:
            return None

        epsilon = self._duplicate_epsilon(A, node_count)
        for br in shorted:
            A[br.index, br.index] += epsilon
            issue = issues.warning(
                IssueCode.MNA_SHORTED_BRANCH, component=br.owner, branch=br.label, net=br.pos, epsilon=epsilon
            )
            logger.warning(issue.message)
        for group in duplicate_groups:
            for br in group[1:]:
                A[br.index, br.index] += epsilon
            net_a, net_b = group[0].pos, group[0].neg
            issue = issues.warning(
                IssueCode.MNA_DUPLICATE_BRANCH, branches=", ".join(f"'{br.label}'" for br in group),
                net_a=net_a, net_b=net_b, epsilon=epsilon
            )
            logger.warning(issue.message)
        return epsilon
