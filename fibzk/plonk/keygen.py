"""
구조 패스 (Key Generation Pass)
================================

witness 없이 회로를 합성하여 테이블의 "모양"만 확정한다.

**왜 필요한가?**
  Verifier가 쓰는 공개 파라미터(셀렉터, fixed 값, 순열)는 회로 구조에만
  의존하고 비밀 값에는 의존하지 않아야 한다. 따라서 합성 코드는
  unknown 값만으로도 끝까지 실행되어야 하고, 그 결과는 실제 witness로
  합성했을 때와 정확히 같은 모양이어야 한다.

**Assembly 가 기록하는 것**:
  - 셀렉터 활성 행 (셀렉터별 길이 n 의 bool 리스트)
  - fixed 열 값
  - copy constraint 순열 (PermutationAssembly)
  - region 배치와 사용된 행 수

advice 값은 기록하지 않는다 (unknown 이어도 된다).

사용 예시:
    >>> shape = keygen(8, circuit)
    >>> shape.rows_used
    >>> shape.cycles
"""

import logging

from fibzk.plonk.constraint_system import ConstraintSystem, FIXED, INSTANCE, ADVICE
from fibzk.plonk.errors import BoundsFailure, NotEnoughRowsAvailable
from fibzk.plonk.layouter import Layouter
from fibzk.plonk.permutation import PermutationAssembly


logger = logging.getLogger(__name__)


class CircuitShape:
    """구조 패스의 결과. 합성 이후 변하지 않는다.

    속성:
        k: 테이블 높이 지수 (n = 2^k)
        cs: ConstraintSystem
        selectors: 셀렉터별 활성 행 bool 리스트
        fixed: fixed 열별 값 리스트 (미할당은 None)
        cycles: copy constraint 순환 목록
        rows_used: region들이 차지한 행 수
        regions: 합성 순서대로의 region 이름 리스트
    """

    def __init__(self, k, cs, selectors, fixed, cycles, rows_used, regions):
        self.k = k
        self.cs = cs
        self.selectors = selectors
        self.fixed = fixed
        self.cycles = cycles
        self.rows_used = rows_used
        self.regions = regions

    def enabled_rows(self, selector):
        """selector가 켜진 행 번호 리스트."""
        return [row for row, on in enumerate(self.selectors[selector.index]) if on]

    def __eq__(self, other):
        if not isinstance(other, CircuitShape):
            return NotImplemented
        return (
            self.k == other.k
            and self.selectors == other.selectors
            and [[None if v is None else int(v) for v in col] for col in self.fixed]
            == [[None if v is None else int(v) for v in col] for col in other.fixed]
            and self.cycles == other.cycles
            and self.rows_used == other.rows_used
            and self.regions == other.regions
        )

    __hash__ = None


class Assembly:
    """구조만 기록하는 합성 백엔드. advice 값은 무시한다."""

    def __init__(self, k, cs):
        self.k = k
        self.n = 1 << k
        self.cs = cs
        self.usable_rows = cs.usable_rows(self.n)
        self.selectors = [[False] * self.n for _ in range(cs.num_selectors)]
        self.fixed = [[None] * self.n for _ in range(cs.num_fixed_columns)]
        self.permutation = PermutationAssembly(cs.permutation_columns)
        self.regions = []
        self.row_regions = {}
        self.current_region = None

    # ── 백엔드 인터페이스 ──

    def enter_region(self, name):
        self.current_region = name
        self.regions.append(name)

    def exit_region(self):
        self.current_region = None

    def _check_row(self, row):
        if row not in self.usable_rows:
            raise NotEnoughRowsAvailable(self.k, row)

    def _check_column(self, column):
        limits = {
            ADVICE: self.cs.num_advice_columns,
            FIXED: self.cs.num_fixed_columns,
            INSTANCE: self.cs.num_instance_columns,
        }
        if not 0 <= column.index < limits[column.kind]:
            raise BoundsFailure(f"선언되지 않은 열입니다: {column}")

    def _note_region(self, row):
        if self.current_region is not None:
            self.row_regions[row] = self.current_region

    def enable_selector(self, annotation, selector, row):
        self._check_row(row)
        if not 0 <= selector.index < len(self.selectors):
            raise BoundsFailure(f"선언되지 않은 셀렉터입니다: {selector}")
        self._note_region(row)
        self.selectors[selector.index][row] = True

    def assign_advice(self, annotation, column, row, value):
        self._check_row(row)
        self._check_column(column)
        self._note_region(row)

    def assign_fixed(self, annotation, column, row, value):
        self._check_row(row)
        self._check_column(column)
        self._note_region(row)
        self.fixed[column.index][row] = value.evaluate()

    def copy(self, left_column, left_row, right_column, right_row):
        self._check_row(left_row)
        self._check_row(right_row)
        self.permutation.copy(left_column, left_row, right_column, right_row)

    # ── 결과 ──

    def shape(self, rows_used):
        return CircuitShape(
            self.k,
            self.cs,
            [list(rows) for rows in self.selectors],
            [list(values) for values in self.fixed],
            self.permutation.cycles(),
            rows_used,
            list(self.regions),
        )


def configure_circuit(k, circuit):
    """제약 시스템을 선언하고 테이블 높이가 충분한지 확인한다.

    Returns:
        tuple: (ConstraintSystem, config)

    Raises:
        NotEnoughRowsAvailable: 2^k 가 최소 행 수보다 작을 때
    """
    cs = ConstraintSystem()
    config = circuit.configure_with_params(cs)
    if (1 << k) < cs.minimum_rows():
        raise NotEnoughRowsAvailable(k)
    return cs, config


def keygen(k, circuit):
    """circuit.without_witnesses()를 합성해 CircuitShape를 만든다.

    Args:
        k: 테이블 높이 지수
        circuit: Circuit 객체 (witness 유무와 무관)

    Returns:
        CircuitShape

    Raises:
        SynthesisError 계열: 구조 오류는 그대로 전파된다
    """
    structural = circuit.without_witnesses()
    cs, config = configure_circuit(k, structural)
    assembly = Assembly(k, cs)
    layouter = Layouter(assembly)
    structural.synthesize(config, layouter)
    logger.debug("keygen: %d row(s) used of %d", layouter.rows_used, assembly.n)
    return assembly.shape(layouter.rows_used)
