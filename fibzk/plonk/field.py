"""
PLONKish 테이블의 유한체(Finite Field)
=======================================

회로 테이블의 모든 셀 값과 게이트 산술에 쓰이는 기본 체를 정의한다.

**유한체 FR**:
  bn128 타원곡선의 스칼라 필드 (scalar field).
  - 위수(order) p ≈ 2^254, 소수체(prime field)
  - p - 1 = 2^28 × m (m은 홀수) → 최대 2^28차 단위근(root of unity)을 지원

**단위근(Roots of Unity)**:
  테이블 높이 n = 2^k 에 대응하는 도메인 H = {1, ω, ..., ω^(n-1)}.
  MockProver의 grand product(순열 누적자) 검사에서 각 행의 좌표로 사용된다.

사용 예시:
    >>> from fibzk.plonk.field import FR
    >>> a = FR(3)
    >>> b = FR(7)
    >>> a + b        # FR(10)
"""

from py_ecc.fields import bn128_FQ as FQ
from py_ecc import bn128


# ─────────────────────────────────────────────────────────────────────
# 유한체(Finite Field) FR
# ─────────────────────────────────────────────────────────────────────

class FR(FQ):
    """bn128 스칼라 필드 위의 유한체 원소.

    py_ecc의 FQ 클래스를 상속하여 +, -, *, /, ** 등의 필드 연산을 제공한다.
    피보나치 회로가 실제로 요구하는 연산은 덧셈, 뺄셈, 동등 비교뿐이다.

    예시:
        >>> FR(CURVE_ORDER - 1) + FR(2)   # FR(1)
    """
    field_modulus = bn128.curve_order


# 곡선 위수 (필드 크기)
CURVE_ORDER = bn128.curve_order

# FR*의 생성자 (root of unity 유도에 사용)
MULTIPLICATIVE_GENERATOR = FR(5)

# p - 1 = 2^TWO_ADICITY × (홀수)
TWO_ADICITY = 28


def to_field(value):
    """정수 또는 FR을 FR로 변환한다.

    Args:
        value: int 또는 FR

    Returns:
        FR

    Raises:
        TypeError: 정수/FR이 아닌 값
    """
    if isinstance(value, FR):
        return value
    if isinstance(value, FQ):
        return FR(value.n)
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"FR로 변환할 수 없는 값입니다: {value!r}")
    return FR(value)


# ─────────────────────────────────────────────────────────────────────
# 단위근 (Roots of Unity)
# ─────────────────────────────────────────────────────────────────────

def get_root_of_unity(n):
    """n차 원시 단위근(primitive n-th root of unity) ω를 반환한다.

    생성자 g = FR(5)를 사용하여 ω = g^((p-1)/n)으로 계산한다.

    Args:
        n: 단위근의 차수 (2의 거듭제곱이어야 하며, ≤ 2^28)

    Returns:
        FR: n차 원시 단위근

    Raises:
        ValueError: n이 2의 거듭제곱이 아니거나 2^28을 초과할 때
    """
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError(f"n은 2의 거듭제곱이어야 합니다: {n}")
    if n > (1 << TWO_ADICITY):
        raise ValueError(f"n은 2^{TWO_ADICITY} 이하여야 합니다: {n}")
    if n == 1:
        return FR(1)

    # ω^n = g^(p-1) = 1 (페르마 소정리)
    exponent = (CURVE_ORDER - 1) // n
    return MULTIPLICATIVE_GENERATOR ** exponent


def get_roots_of_unity(n):
    """n개의 단위근 리스트 [1, ω, ω², ..., ω^(n-1)]을 반환한다.

    Args:
        n: 도메인 크기 (2의 거듭제곱)

    Returns:
        list[FR]: [ω^0, ω^1, ..., ω^(n-1)]
    """
    omega = get_root_of_unity(n)
    roots = []
    current = FR(1)
    for _ in range(n):
        roots.append(current)
        current = current * omega
    return roots
