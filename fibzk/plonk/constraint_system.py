"""
PLONKish 제약 시스템 (Constraint System)
=========================================

회로의 "모양"을 선언하는 레지스트리: 열, 셀렉터, 커스텀 게이트, equality 허용 열.

**열(Column) 종류**:
  | 종류     | 내용                              | 누가 채우나     |
  |----------|-----------------------------------|-----------------|
  | advice   | 비공개 witness 값                 | Prover          |
  | fixed    | 회로에 고정된 상수                | 회로 설계자     |
  | instance | 공개 입력(public input)           | Verifier도 앎   |

**커스텀 게이트**:
  바닐라 PLONK 게이트 q_L·a + q_R·b + q_O·c + q_M·(a·b) + q_C = 0 과 달리,
  각 게이트는 임의의 다항식 목록으로 선언되고 셀렉터로 행마다 켜고 끈다.
  예: 덧셈 게이트  s · (a + b − c) = 0  은 바닐라 PLONK에서
      q_L = q_R = s,  q_O = −s,  q_M = q_C = 0  과 같은 제약이다.

**Equality (copy constraint) 허용**:
  어떤 셀을 다른 셀과 같다고 묶으려면 두 셀의 열이 모두 enable_equality로
  순열(permutation)에 등록되어 있어야 한다.

사용 예시:
    >>> meta = ConstraintSystem()
    >>> a, b, c = meta.advice_column(), meta.advice_column(), meta.advice_column()
    >>> s = meta.selector()
    >>> meta.create_gate("add", lambda vc: [
    ...     vc.query_selector(s) * (vc.query_advice(a, Rotation.cur())
    ...                             + vc.query_advice(b, Rotation.cur())
    ...                             - vc.query_advice(c, Rotation.cur()))
    ... ])
"""

import logging

from fibzk.plonk.expression import Expression, Query, SelectorExpr


logger = logging.getLogger(__name__)


ADVICE = "advice"
FIXED = "fixed"
INSTANCE = "instance"


class Column:
    """테이블의 한 열. (종류, 인덱스)로 식별된다."""

    def __init__(self, kind, index):
        if kind not in (ADVICE, FIXED, INSTANCE):
            raise ValueError(f"알 수 없는 열 종류입니다: {kind}")
        self.kind = kind
        self.index = index

    def __eq__(self, other):
        if not isinstance(other, Column):
            return NotImplemented
        return self.kind == other.kind and self.index == other.index

    def __hash__(self):
        return hash((self.kind, self.index))

    def __lt__(self, other):
        order = (ADVICE, FIXED, INSTANCE)
        return (order.index(self.kind), self.index) < (order.index(other.kind), other.index)

    def __repr__(self):
        return f"{self.kind}[{self.index}]"


class Selector:
    """행마다 게이트를 켜고 끄는 0/1 플래그."""

    def __init__(self, index):
        self.index = index

    def enable(self, region, offset):
        """region 안의 offset 행에서 이 셀렉터를 켠다."""
        region.enable_selector(self, offset)

    def __eq__(self, other):
        if not isinstance(other, Selector):
            return NotImplemented
        return self.index == other.index

    def __hash__(self):
        return hash(("selector", self.index))

    def __repr__(self):
        return f"selector[{self.index}]"


class Gate:
    """이름이 붙은 다항식 제약 묶음.

    속성:
        name: 게이트 이름
        constraint_names: 제약별 이름 (없으면 빈 문자열)
        polynomials: Expression 리스트 — 활성 행에서 각각 0이어야 한다
        queried_selectors: 게이트가 읽는 셀렉터들
        queried_cells: 게이트가 읽는 (column, rotation) 질의들
    """

    def __init__(self, name, constraint_names, polynomials, queried_selectors=(), queried_cells=()):
        self.name = name
        self.constraint_names = constraint_names
        self.polynomials = polynomials
        self.queried_selectors = list(queried_selectors)
        self.queried_cells = list(queried_cells)

    def degree(self):
        return max(poly.degree() for poly in self.polynomials)

    def __repr__(self):
        return f"Gate({self.name!r}, {self.polynomials!r})"


class VirtualCells:
    """create_gate 콜백에 전달되는 질의 도우미.

    콜백 안에서 만든 질의는 여기에 기록되어 열별 질의 수 계산에 쓰인다.
    """

    def __init__(self, meta):
        self.meta = meta
        self.queried_selectors = []
        self.queried_cells = []

    def query_selector(self, selector):
        self.queried_selectors.append(selector)
        return SelectorExpr(selector)

    def _query(self, column, kind, rotation):
        if column.kind != kind:
            raise ValueError(f"{column}은(는) {kind} 열이 아닙니다")
        self.queried_cells.append((column, rotation))
        return Query(column, rotation)

    def query_advice(self, column, rotation):
        return self._query(column, ADVICE, rotation)

    def query_fixed(self, column, rotation):
        return self._query(column, FIXED, rotation)

    def query_instance(self, column, rotation):
        return self._query(column, INSTANCE, rotation)


class ConstraintSystem:
    """열/셀렉터/게이트/순열 선언을 모아 두는 레지스트리."""

    def __init__(self):
        self.num_advice_columns = 0
        self.num_fixed_columns = 0
        self.num_instance_columns = 0
        self.num_selectors = 0
        self.gates = []
        self.permutation_columns = []
        # 열별 서로 다른 rotation 질의 집합
        self.advice_queries = {}

    # ── 열/셀렉터 할당 ──

    def advice_column(self):
        column = Column(ADVICE, self.num_advice_columns)
        self.num_advice_columns += 1
        return column

    def fixed_column(self):
        column = Column(FIXED, self.num_fixed_columns)
        self.num_fixed_columns += 1
        return column

    def instance_column(self):
        column = Column(INSTANCE, self.num_instance_columns)
        self.num_instance_columns += 1
        return column

    def selector(self):
        selector = Selector(self.num_selectors)
        self.num_selectors += 1
        return selector

    def enable_equality(self, column):
        """column을 copy constraint 대상(순열)에 등록한다. 중복 등록은 무시."""
        if column not in self.permutation_columns:
            self.permutation_columns.append(column)

    # ── 게이트 ──

    def create_gate(self, name, constraints):
        """커스텀 게이트를 등록한다.

        Args:
            name: 게이트 이름
            constraints: VirtualCells를 받아 Expression 리스트,
                         또는 (제약 이름, Expression) 튜플 리스트를 돌려주는 함수

        Returns:
            Gate: 등록된 게이트

        Raises:
            ValueError: 제약이 하나도 없거나 Expression이 아닌 항목이 있을 때
        """
        cells = VirtualCells(self)
        items = list(constraints(cells))
        if not items:
            raise ValueError(f"게이트 '{name}'에는 최소 한 개의 제약이 필요합니다")

        constraint_names = []
        polynomials = []
        for item in items:
            if isinstance(item, tuple):
                constraint_name, poly = item
            else:
                constraint_name, poly = "", item
            if not isinstance(poly, Expression):
                raise ValueError(f"게이트 '{name}'의 제약이 Expression이 아닙니다: {poly!r}")
            constraint_names.append(constraint_name)
            polynomials.append(poly)

        if any(gate.name == name for gate in self.gates):
            logger.warning("gate %r registered more than once", name)

        for column, rotation in cells.queried_cells:
            if column.kind == ADVICE:
                self.advice_queries.setdefault(column, set()).add(rotation)

        gate = Gate(
            name, constraint_names, polynomials,
            cells.queried_selectors, cells.queried_cells,
        )
        self.gates.append(gate)
        logger.debug("registered gate %r with %d constraint(s)", name, len(polynomials))
        return gate

    # ── 테이블 크기 관련 ──

    def degree(self):
        """회로의 최대 제약 차수 (순열 인자의 최소 차수 3 포함)."""
        gate_degree = max((gate.degree() for gate in self.gates), default=0)
        return max(3, gate_degree)

    def blinding_factors(self):
        """Zero-knowledge를 위해 테이블 끝에 남겨 두는 랜덤 행 수."""
        max_queries = max((len(rotations) for rotations in self.advice_queries.values()), default=1)
        return max(3, max_queries) + 2

    def minimum_rows(self):
        """블라인딩 행 + 마지막 행 + 최소 한 개의 사용 행."""
        return self.blinding_factors() + 1 + 1

    def usable_rows(self, n):
        """높이 n 테이블에서 사용 가능한 행 범위."""
        return range(0, max(0, n - (self.blinding_factors() + 1)))
