"""
점화식 드라이버 (Recurrence Driver)
====================================

(a, b)에서 시작해 k-1개의 행을 차례로 할당한다.

  상태: (f0, f1) = (a, b), 이전 출력 셀 없음
  x = 0, 1, ..., k-2 마다:
    - FibChip.assign_row((f0, f1), 이전 c 셀, z, is_last = (x == k-2))
    - (f0, f1) ← (f1, f0 + f1)
    - 이번 행의 c 셀을 다음 행의 입력 b 로 넘긴다

행 x의 c 열에는 f(x+2)가 들어가므로, 마지막 행 x = k-2 의 c 는 f(k) 자리이다.
k < 2 이면 할당할 행이 없어 주장이 공허해지므로 InvalidIndexError로 거부한다.

예시 (a=1, b=2, k=9):
    행 0: 1 + 2 = 3
    행 1: 2 + 3 = 5
    ...
    행 7: 34 + 55 = z   (z = 89 이어야 통과)
"""

import logging

from fibzk.plonk.errors import ColumnNotInPermutation
from fibzk.plonk.field import to_field
from fibzk.plonk.value import Value


logger = logging.getLogger(__name__)


class InvalidIndexError(ValueError):
    """k < 2 처럼 증명할 행이 없는 인덱스."""


def check_index(k):
    """k가 2 이상의 정수인지 확인한다.

    Raises:
        InvalidIndexError
    """
    if isinstance(k, bool) or not isinstance(k, int):
        raise InvalidIndexError(f"k는 정수여야 합니다: {k!r}")
    if k < 2:
        raise InvalidIndexError(f"k는 2 이상이어야 합니다 (증명할 행이 없음): {k}")


def check_equality(config, layouter):
    """행을 연결하는 데 쓰이는 열이 모두 equality 허용 상태인지 확인한다.

    b 열(이전 c를 받는 쪽)과 c 열, 공개 인덱스 모드의 카운터 열과
    instance 열이 대상이다.

    Raises:
        ColumnNotInPermutation
    """
    columns = list(config.advice[1:])
    if config.index is not None:
        index = config.index
        columns += [index.index_in, index.index_out, index.instance]
    enabled = layouter.equality_columns
    for column in columns:
        if column not in enabled:
            raise ColumnNotInPermutation(column)


def recurrence_value(a, b, n):
    """f(0) = a, f(1) = b 인 점화식의 f(n)을 FR로 계산한다."""
    if n < 0:
        raise ValueError(f"n은 0 이상이어야 합니다: {n}")
    f0, f1 = to_field(a), to_field(b)
    for _ in range(n):
        f0, f1 = f1, f0 + f1
    return f0


class RecurrenceState:
    """합성 동안에만 존재하는 드라이버 상태.

    속성:
        f0, f1: 다음 행의 입력 (Value)
        copy_cell: 직전 행의 c 셀
        index_cell: 직전 행의 index_out 셀 (공개 인덱스 모드)
    """

    def __init__(self, a, b):
        self.f0 = a
        self.f1 = b
        self.copy_cell = None
        self.index_cell = None

    def advance(self, row):
        self.f0, self.f1 = self.f1, self.f0 + self.f1
        self.copy_cell = row.c
        self.index_cell = row.index_out


def assign_recurrence(chip, layouter, a, b, z, k):
    """k-1개의 행을 할당하고 AssignedRow 리스트를 반환한다.

    Args:
        chip: FibChip
        layouter: Layouter
        a, b, z: Value (또는 FR/int)
        k: 증명할 항 번호 (int, 2 이상)

    Returns:
        list[AssignedRow]

    Raises:
        InvalidIndexError: k < 2 (행을 하나도 만들기 전에 발생)
        ColumnNotInPermutation: 연결용 열에 equality가 없을 때 (역시 첫 행 전에 발생)
    """
    check_index(k)
    check_equality(chip.config, layouter)
    state = RecurrenceState(Value.wrap(a), Value.wrap(b))
    z = Value.wrap(z)

    rows = []
    # 첫 행에서 f(2)를 얻으므로 [0, k-1) 범위를 돈다
    for x in range(k - 1):
        row = chip.assign_row(
            layouter.namespace(f"assign f_{x}, f_{x + 1}, f_{x + 2}"),
            state.f0,
            state.f1,
            state.copy_cell,
            z,
            x == k - 2,
            state.index_cell,
        )
        logger.debug("assigned recurrence row %d of %d", x + 1, k - 1)
        rows.append(row)
        state.advance(row)

    return rows

