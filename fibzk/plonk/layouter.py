"""
테이블 레이아웃: Region / Layouter / Circuit
=============================================

회로 합성 코드는 테이블의 절대 행 번호를 직접 다루지 않는다.
대신 "region" 단위로 셀을 할당하고, Layouter가 region들을 테이블 위에
차례로 배치한다.

  ┌─────────────┬──────┬──────┬──────┬─────┐
  │ 절대 행      │  a   │  b   │  c   │  s  │
  ├─────────────┼──────┼──────┼──────┼─────┤
  │ 0 (region 0)│  1   │  2   │  3   │  1  │
  │ 1 (region 1)│  2   │ =c₀  │  5   │  1  │
  │ 2 (region 2)│  3   │ =c₁  │  8   │  1  │
  └─────────────┴──────┴──────┴──────┴─────┘

**Cell**: (region 번호, region 내 오프셋, 열) — 값을 소유하지 않는 참조.
  copy constraint는 Cell 두 개를 Layouter가 절대 위치로 풀어서
  백엔드의 순열에 넘긴다.

**백엔드(Assignment)**:
  실제 값을 저장하는 쪽. MockProver(값 검사)와 keygen의 Assembly
  (구조만 기록) 두 가지가 있으며 다음 메서드를 제공한다:
    enter_region(name), exit_region()
    enable_selector(annotation, selector, row)
    assign_advice(annotation, column, row, value)
    assign_fixed(annotation, column, row, value)
    copy(left_column, left_row, right_column, right_row)

사용 예시:
    >>> def fill(region):
    ...     config.selector.enable(region, 0)
    ...     return region.assign_advice("f_0", config.a, 0, lambda: a)
    >>> cell = layouter.assign_region("first row", fill)
"""

import logging

from fibzk.plonk.constraint_system import ADVICE, FIXED, INSTANCE
from fibzk.plonk.errors import BoundsFailure
from fibzk.plonk.value import Value


logger = logging.getLogger(__name__)


class Cell:
    """테이블 셀에 대한 비소유 참조."""

    def __init__(self, region_index, row_offset, column):
        self.region_index = region_index
        self.row_offset = row_offset
        self.column = column

    def __eq__(self, other):
        if not isinstance(other, Cell):
            return NotImplemented
        return (
            self.region_index == other.region_index
            and self.row_offset == other.row_offset
            and self.column == other.column
        )

    def __hash__(self):
        return hash((self.region_index, self.row_offset, self.column))

    def __repr__(self):
        return f"Cell(region={self.region_index}, offset={self.row_offset}, {self.column})"


class AssignedCell:
    """할당된 셀: 셀 위치와 그 셀에 들어간 (지연) 값."""

    def __init__(self, value, cell):
        self._value = value
        self.cell = cell

    def value(self):
        return self._value

    def copy_advice(self, annotation, region, column, offset):
        """이 셀의 값을 region의 (column, offset)에 복사하고 equality로 묶는다.

        Returns:
            AssignedCell: 새로 할당된 셀

        Raises:
            ColumnNotInPermutation: 두 열 중 하나라도 equality가 허용되지 않았을 때
        """
        value = self._value
        assigned = region.assign_advice(annotation, column, offset, lambda: value)
        region.constrain_equal(self.cell, assigned.cell)
        return assigned

    def __repr__(self):
        return f"AssignedCell({self._value!r}, {self.cell!r})"


class Region:
    """Layouter가 잡아 준 연속된 행 묶음. 오프셋은 region 시작 기준."""

    def __init__(self, layouter, index, start):
        self.layouter = layouter
        self.index = index
        self.start = start
        self.rows = 0

    def _row(self, offset):
        if offset < 0:
            raise BoundsFailure(f"region 오프셋은 음수일 수 없습니다: {offset}")
        self.rows = max(self.rows, offset + 1)
        return self.start + offset

    def enable_selector(self, selector, offset, annotation=""):
        row = self._row(offset)
        self.layouter.backend.enable_selector(annotation, selector, row)

    def assign_advice(self, annotation, column, offset, to):
        """advice 셀에 to()의 값을 할당한다.

        Args:
            annotation: 셀 설명 (실패 메시지에 사용)
            column: advice Column
            offset: region 내 행 오프셋
            to: Value(또는 FR/int)를 돌려주는 함수. 구조 패스에서는
                unknown Value를 돌려줘도 된다.
        """
        if column.kind != ADVICE:
            raise BoundsFailure(f"{column}은(는) advice 열이 아닙니다")
        value = Value.wrap(to())
        row = self._row(offset)
        self.layouter.backend.assign_advice(annotation, column, row, value)
        return AssignedCell(value, Cell(self.index, offset, column))

    def assign_fixed(self, annotation, column, offset, to):
        if column.kind != FIXED:
            raise BoundsFailure(f"{column}은(는) fixed 열이 아닙니다")
        value = Value.wrap(to())
        row = self._row(offset)
        self.layouter.backend.assign_fixed(annotation, column, row, value)
        return AssignedCell(value, Cell(self.index, offset, column))

    def constrain_equal(self, left, right):
        self.layouter.constrain_equal(left, right)


class Layouter:
    """region을 테이블 위에 위에서부터 차례로 쌓는 단순 배치기.

    region 하나가 끝나면 그 region이 사용한 행 수만큼 다음 시작 행이 내려간다.
    namespace()는 같은 테이블을 공유하면서 이름 접두어만 붙인 Layouter를 돌려준다.
    """

    def __init__(self, backend, prefix="", shared=None):
        self.backend = backend
        self.prefix = prefix
        # region 시작 행과 다음 빈 행은 namespace 사이에서 공유한다
        self._shared = shared if shared is not None else {"starts": [], "next_row": 0}

    @property
    def region_starts(self):
        return self._shared["starts"]

    @property
    def rows_used(self):
        return self._shared["next_row"]

    @property
    def equality_columns(self):
        """copy constraint가 허용된 열 리스트 (백엔드의 제약 시스템 기준)."""
        return self.backend.cs.permutation_columns

    def namespace(self, name):
        prefix = f"{self.prefix}/{name}" if self.prefix else name
        return Layouter(self.backend, prefix, self._shared)

    def _qualified(self, name):
        return f"{self.prefix}/{name}" if self.prefix else name

    def assign_region(self, name, assignment):
        """새 region을 열고 assignment(region)을 실행한 뒤 결과를 반환한다."""
        index = len(self._shared["starts"])
        start = self._shared["next_row"]
        self._shared["starts"].append(start)
        region = Region(self, index, start)

        qualified = self._qualified(name)
        self.backend.enter_region(qualified)
        try:
            result = assignment(region)
        finally:
            self.backend.exit_region()

        self._shared["next_row"] = start + region.rows
        logger.debug("region %d %r placed at row %d (%d row(s))", index, qualified, start, region.rows)
        return result

    def absolute_row(self, cell):
        return self._shared["starts"][cell.region_index] + cell.row_offset

    def constrain_equal(self, left, right):
        self.backend.copy(
            left.column, self.absolute_row(left),
            right.column, self.absolute_row(right),
        )

    def constrain_instance(self, cell, instance, row):
        """cell의 값이 instance 열 row 행의 공개 입력과 같도록 묶는다."""
        if instance.kind != INSTANCE:
            raise BoundsFailure(f"{instance}은(는) instance 열이 아닙니다")
        self.backend.copy(cell.column, self.absolute_row(cell), instance, row)


class Circuit:
    """회로 정의의 기반 클래스.

    수명 주기:
      1. configure(meta): 열/셀렉터/게이트 선언 (witness 없음) → config
      2. synthesize(config, layouter): witness로 테이블 채우기

    configure가 돌려준 config는 이후 변하지 않으며, synthesize가 비밀 값
    외에 필요로 하는 유일한 입력이다.
    """

    def without_witnesses(self):
        """같은 구조를 갖되 모든 witness가 unknown인 회로."""
        raise NotImplementedError

    def configure_with_params(self, meta):
        """인스턴스에 저장된 설정 플래그로 configure를 호출한다."""
        return self.configure(meta)

    @classmethod
    def configure(cls, meta):
        raise NotImplementedError

    def synthesize(self, config, layouter):
        raise NotImplementedError
