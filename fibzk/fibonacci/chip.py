"""
피보나치 칩 (FibChip): 게이트 선언 + 행 할당
==============================================

증명하려는 주장: f(0) = a, f(1) = b, f(n) = f(n-1) + f(n-2) 일 때 f(k) = z.

**테이블 구조** (a=1, b=1, k=6, z=13):

    a | b | c  | s |  index_in | index_out | s_first ║ instance
    --+---+----+---+-----------+-----------+---------╫---------
    1   1   2    1       1           2          1    ║   6
    1   2   3    1       2           3          0    ║
    2   3   5    1       3           4          0    ║
    3   5   8    1       4           5          0    ║
    5   8   13   1       5           6          0    ║
                                 (=k ↗ copy)

  - 행 x의 c는 f(x+2). 마지막 행(x = k-2)의 c에는 a+b 대신 주장값 z를 넣는다.
    그러면 같은 덧셈 게이트가 "점화식이 맞는가"와 "z로 끝나는가"를 동시에 검사한다.
  - 행 i의 출력 c_i 는 행 i+1의 입력 b_{i+1} 로 복사된다 (copy constraint).
  - index 열들은 공개 인덱스 모드에서만 존재한다. index_out 은 c에 들어간 항의
    번호이며, 마지막 행의 index_out 이 instance 열의 k와 묶인다.

**게이트**:
  add         : s · (a + b − c) = 0
  index step  : s · (index_in + 1 − index_out) = 0        (공개 인덱스 모드)
  index start : s_first · (index_in − 1) = 0              (공개 인덱스 모드)
"""

import logging

from fibzk.plonk.expression import Rotation
from fibzk.plonk.field import FR
from fibzk.plonk.value import Value


logger = logging.getLogger(__name__)


class IndexConfig:
    """공개 인덱스 모드의 열/셀렉터.

    속성:
        index_in, index_out: 항 번호 카운터 advice 열
        first: 첫 행에서만 켜지는 셀렉터
        instance: k가 들어가는 instance 열
    """

    def __init__(self, index_in, index_out, first, instance):
        self.index_in = index_in
        self.index_out = index_out
        self.first = first
        self.instance = instance


class FibConfig:
    """configure 결과: 세 advice 열, 셀렉터, (선택) 인덱스 설정."""

    def __init__(self, advice, selector, index=None):
        self.advice = list(advice)
        self.selector = selector
        self.index = index


class AssignedRow:
    """할당이 끝난 한 행. 순회하면 (a, b, c) 셀을 돌려준다."""

    def __init__(self, a, b, c, index_in=None, index_out=None):
        self.a = a
        self.b = b
        self.c = c
        self.index_in = index_in
        self.index_out = index_out

    def __iter__(self):
        return iter((self.a, self.b, self.c))


class FibChip:
    """피보나치 점화식 한 단계를 테이블 한 행으로 할당하는 칩."""

    def __init__(self, config):
        self.config = config

    @classmethod
    def construct(cls, config):
        return cls(config)

    @staticmethod
    def configure(meta, advice, instance=None):
        """덧셈 게이트를 선언하고 FibConfig를 반환한다.

        Args:
            meta: ConstraintSystem
            advice: advice 열 3개 [a, b, c]
            instance: 주어지면 공개 인덱스 모드 (k를 이 instance 열에 묶는다)

        Returns:
            FibConfig
        """
        col_a, col_b, col_c = advice
        selector = meta.selector()
        meta.enable_equality(col_a)
        meta.enable_equality(col_b)
        meta.enable_equality(col_c)

        # 선택된 행에서 f_n + f_{n+1} − f_{n+2} = 0
        def add_gate(vc):
            s = vc.query_selector(selector)
            a = vc.query_advice(col_a, Rotation.cur())
            b = vc.query_advice(col_b, Rotation.cur())
            c = vc.query_advice(col_c, Rotation.cur())
            return [s * (a + b - c)]

        meta.create_gate("add", add_gate)

        index = None
        if instance is not None:
            index = FibChip.configure_index(meta, selector, instance)

        return FibConfig([col_a, col_b, col_c], selector, index)

    @staticmethod
    def configure_index(meta, selector, instance):
        """항 번호 카운터 열과 두 게이트를 선언한다."""
        index_in = meta.advice_column()
        index_out = meta.advice_column()
        first = meta.selector()
        meta.enable_equality(index_in)
        meta.enable_equality(index_out)
        meta.enable_equality(instance)

        def step_gate(vc):
            s = vc.query_selector(selector)
            i_in = vc.query_advice(index_in, Rotation.cur())
            i_out = vc.query_advice(index_out, Rotation.cur())
            return [("index_out = index_in + 1", s * (i_in + 1 - i_out))]

        def start_gate(vc):
            s_first = vc.query_selector(first)
            i_in = vc.query_advice(index_in, Rotation.cur())
            return [("index_in = 1", s_first * (i_in - 1))]

        meta.create_gate("index step", step_gate)
        meta.create_gate("index start", start_gate)
        return IndexConfig(index_in, index_out, first, instance)

    def assign_row(self, layouter, a, b, copy_cell, z, is_last, index_cell=None):
        """점화식 한 단계를 region 하나(한 행)에 할당한다.

        Args:
            layouter: Layouter
            a: f_n (Value)
            b: f_{n+1} (Value). copy_cell이 있으면 쓰이지 않는다
            copy_cell: 이전 행의 c 셀 (첫 행이면 None)
            z: 주장값 (Value). is_last일 때만 쓰인다
            is_last: 마지막 행 여부
            index_cell: 이전 행의 index_out 셀 (공개 인덱스 모드, 첫 행이면 None)

        Returns:
            AssignedRow

        Raises:
            ColumnNotInPermutation: copy_cell의 열에 equality가 허용되지 않았을 때
        """
        config = self.config
        col_a, col_b, col_c = config.advice

        def assign(region):
            config.selector.enable(region, 0)

            a_cell = region.assign_advice("f_0", col_a, 0, lambda: a)

            if copy_cell is not None:
                b_cell = copy_cell.copy_advice("current result = prev input", region, col_b, 0)
            else:
                b_cell = region.assign_advice("f_1", col_b, 0, lambda: b)

            # 마지막 행에는 a + b 대신 z를 넣어 f(k) = z 를 검사한다
            if is_last:
                c_value = Value.wrap(z)
            else:
                c_value = a_cell.value() + b_cell.value()
            c_cell = region.assign_advice("f_2", col_c, 0, lambda: c_value)

            index_in = index_out = None
            if config.index is not None:
                index_in, index_out = self._assign_index(region, index_cell)

            return AssignedRow(a_cell, b_cell, c_cell, index_in, index_out)

        return layouter.assign_region("fib row", assign)

    def _assign_index(self, region, index_cell):
        index = self.config.index
        if index_cell is not None:
            index_in = index_cell.copy_advice("index = prev index", region, index.index_in, 0)
        else:
            index.first.enable(region, 0)
            index_in = region.assign_advice("index_0", index.index_in, 0, lambda: Value.known(FR(1)))
        next_value = index_in.value() + FR(1)
        index_out = region.assign_advice("index", index.index_out, 0, lambda: next_value)
        return index_in, index_out
