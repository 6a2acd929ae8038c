"""
제약 시스템과 표현식 테스트.

테스트 대상:
  - Expression: 평가, 차수, 질의 목록
  - ConstraintSystem: 열/셀렉터 할당, enable_equality, create_gate,
                      blinding_factors / usable_rows
"""

import logging

import pytest

from fibzk.plonk.constraint_system import (
    ADVICE, FIXED, INSTANCE,
    Column, ConstraintSystem, Selector,
)
from fibzk.plonk.expression import Constant, Query, Rotation, SelectorExpr
from fibzk.plonk.field import FR, CURVE_ORDER


class DictResolver:
    """테스트용 resolver: (column, rotation) → 값 딕셔너리."""

    def __init__(self, cells, selectors=None):
        self.cells = cells
        self.selectors = selectors or {}

    def selector(self, selector):
        return FR(self.selectors.get(selector.index, 0))

    def query(self, column, rotation):
        return FR(self.cells[(column, rotation)])


# ─────────────────────────────────────────────────────────────────────
# Expression 테스트
# ─────────────────────────────────────────────────────────────────────

class TestExpression:
    """Expression 테스트."""

    def setup_method(self):
        self.a = Column(ADVICE, 0)
        self.b = Column(ADVICE, 1)
        self.c = Column(ADVICE, 2)
        self.s = Selector(0)

    def _add_gate(self):
        a = Query(self.a, Rotation.cur())
        b = Query(self.b, Rotation.cur())
        c = Query(self.c, Rotation.cur())
        return SelectorExpr(self.s) * (a + b - c)

    def test_rotation(self):
        """cur/next/prev = 0/1/-1."""
        assert Rotation.cur() == 0
        assert Rotation.next() == 1
        assert Rotation.prev() == -1

    def test_add_gate_satisfied(self):
        """3 + 5 − 8 = 0."""
        resolver = DictResolver({(self.a, 0): 3, (self.b, 0): 5, (self.c, 0): 8}, {0: 1})
        assert self._add_gate().evaluate(resolver) == FR(0)

    def test_add_gate_unsatisfied(self):
        """3 + 5 − 9 = −1 (mod p)."""
        resolver = DictResolver({(self.a, 0): 3, (self.b, 0): 5, (self.c, 0): 9}, {0: 1})
        assert self._add_gate().evaluate(resolver) == FR(CURVE_ORDER - 1)

    def test_selector_off(self):
        """셀렉터가 0이면 값과 무관하게 0."""
        resolver = DictResolver({(self.a, 0): 3, (self.b, 0): 5, (self.c, 0): 100}, {0: 0})
        assert self._add_gate().evaluate(resolver) == FR(0)

    def test_constant_arithmetic(self):
        """정수 피연산자는 상수로 승격."""
        a = Query(self.a, Rotation.cur())
        expr = a + 1
        resolver = DictResolver({(self.a, 0): 41})
        assert expr.evaluate(resolver) == FR(42)
        assert (1 - a).evaluate(resolver) == FR(CURVE_ORDER - 40)
        assert (a * 2).evaluate(resolver) == FR(82)
        assert (3 * a).evaluate(resolver) == FR(123)
        assert (-a).evaluate(resolver) == FR(CURVE_ORDER - 41)

    def test_degree(self):
        """곱셈은 차수를 더하고 상수배는 유지."""
        a = Query(self.a, Rotation.cur())
        assert Constant(7).degree() == 0
        assert a.degree() == 1
        assert (a * a).degree() == 2
        assert self._add_gate().degree() == 2
        assert (a * 5).degree() == 1

    def test_queries(self):
        """질의는 등장 순서대로."""
        queries = self._add_gate().queries()
        assert queries == [(self.a, 0), (self.b, 0), (self.c, 0)]

    def test_repr(self):
        """질의 표기는 "열@회전"."""
        assert repr(Query(self.a, Rotation.next())) == "advice[0]@+1"
        assert repr(Constant(5)) == "Constant(5)"


# ─────────────────────────────────────────────────────────────────────
# Column / Selector 테스트
# ─────────────────────────────────────────────────────────────────────

class TestColumn:
    """Column / Selector 테스트."""

    def test_equality_and_hash(self):
        """(종류, 번호)가 같으면 같은 열."""
        assert Column(ADVICE, 0) == Column(ADVICE, 0)
        assert Column(ADVICE, 0) != Column(FIXED, 0)
        assert len({Column(ADVICE, 0), Column(ADVICE, 0), Column(INSTANCE, 0)}) == 2

    def test_invalid_kind(self):
        """알 수 없는 종류는 ValueError."""
        with pytest.raises(ValueError):
            Column("lookup", 0)

    def test_ordering(self):
        """advice < fixed < instance 순 정렬."""
        columns = [Column(INSTANCE, 0), Column(ADVICE, 1), Column(FIXED, 0), Column(ADVICE, 0)]
        assert sorted(columns) == [
            Column(ADVICE, 0), Column(ADVICE, 1), Column(FIXED, 0), Column(INSTANCE, 0),
        ]

    def test_selector_equality(self):
        """번호가 같으면 같은 셀렉터."""
        assert Selector(1) == Selector(1)
        assert Selector(1) != Selector(2)


# ─────────────────────────────────────────────────────────────────────
# ConstraintSystem 테스트
# ─────────────────────────────────────────────────────────────────────

class TestConstraintSystem:
    """ConstraintSystem 테스트."""

    def test_empty(self):
        """빈 제약 시스템."""
        meta = ConstraintSystem()
        assert meta.num_advice_columns == 0
        assert meta.gates == []
        assert meta.permutation_columns == []

    def test_column_allocation(self):
        """열과 셀렉터는 종류별로 0부터 번호가 매겨진다."""
        meta = ConstraintSystem()
        assert meta.advice_column() == Column(ADVICE, 0)
        assert meta.advice_column() == Column(ADVICE, 1)
        assert meta.fixed_column() == Column(FIXED, 0)
        assert meta.instance_column() == Column(INSTANCE, 0)
        assert meta.selector() == Selector(0)
        assert meta.selector() == Selector(1)
        assert meta.num_advice_columns == 2
        assert meta.num_selectors == 2

    def test_enable_equality_once(self):
        """같은 열을 두 번 등록해도 한 번만."""
        meta = ConstraintSystem()
        col = meta.advice_column()
        meta.enable_equality(col)
        meta.enable_equality(col)
        assert meta.permutation_columns == [col]

    def test_create_gate(self):
        """게이트는 셀렉터와 셀 질의를 기록한다."""
        meta = ConstraintSystem()
        a, b, c = meta.advice_column(), meta.advice_column(), meta.advice_column()
        s = meta.selector()

        def add(vc):
            return [vc.query_selector(s) * (
                vc.query_advice(a, Rotation.cur())
                + vc.query_advice(b, Rotation.cur())
                - vc.query_advice(c, Rotation.cur())
            )]

        gate = meta.create_gate("add", add)
        assert meta.gates == [gate]
        assert gate.name == "add"
        assert gate.constraint_names == [""]
        assert gate.queried_selectors == [s]
        assert gate.queried_cells == [(a, 0), (b, 0), (c, 0)]
        assert gate.degree() == 2
        assert meta.degree() == 3

    def test_named_constraints(self):
        """(이름, 식) 튜플로 제약 이름 지정."""
        meta = ConstraintSystem()
        a = meta.advice_column()
        s = meta.selector()
        gate = meta.create_gate("bool", lambda vc: [
            ("a is boolean", vc.query_selector(s) * vc.query_advice(a, 0) * (1 - vc.query_advice(a, 0))),
        ])
        assert gate.constraint_names == ["a is boolean"]
        assert gate.degree() == 3

    def test_empty_gate_rejected(self):
        """제약 없는 게이트 거부."""
        meta = ConstraintSystem()
        with pytest.raises(ValueError):
            meta.create_gate("empty", lambda vc: [])

    def test_non_expression_rejected(self):
        """Expression이 아닌 제약 거부."""
        meta = ConstraintSystem()
        with pytest.raises(ValueError):
            meta.create_gate("bad", lambda vc: [FR(0)])

    def test_query_wrong_kind(self):
        """fixed 열을 advice로 질의하면 ValueError."""
        meta = ConstraintSystem()
        fixed = meta.fixed_column()
        with pytest.raises(ValueError):
            meta.create_gate("bad", lambda vc: [vc.query_advice(fixed, 0)])

    def test_duplicate_gate_warns(self, caplog):
        """같은 이름의 게이트를 두 번 등록하면 경고만 남기고 둘 다 유지."""
        meta = ConstraintSystem()
        a = meta.advice_column()
        with caplog.at_level(logging.WARNING, logger="fibzk.plonk.constraint_system"):
            meta.create_gate("g", lambda vc: [vc.query_advice(a, 0)])
            meta.create_gate("g", lambda vc: [vc.query_advice(a, 0)])
        assert len(meta.gates) == 2
        assert "more than once" in caplog.text

    def test_blinding_factors_and_usable_rows(self):
        """회전 2개 → blinding 5, 16행 중 10행 사용."""
        meta = ConstraintSystem()
        a = meta.advice_column()
        meta.create_gate("g", lambda vc: [vc.query_advice(a, 0) - vc.query_advice(a, 1)])
        # max(3, 2) + 2
        assert meta.blinding_factors() == 5
        assert meta.minimum_rows() == 7
        assert meta.usable_rows(16) == range(0, 10)

    def test_blinding_factors_grow_with_queries(self):
        """회전 4개 → blinding 6."""
        meta = ConstraintSystem()
        a = meta.advice_column()
        meta.create_gate("g", lambda vc: [
            vc.query_advice(a, -1) + vc.query_advice(a, 0) + vc.query_advice(a, 1) + vc.query_advice(a, 2)
        ])
        assert meta.blinding_factors() == 6
