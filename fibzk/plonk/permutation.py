"""
PLONK 순열 인자 (Permutation Argument)
========================================

배선 복사 제약(copy constraint)을 순열(permutation)로 인코딩하는 모듈.

**배경: 왜 순열이 필요한가?**
  게이트는 각 행에서 독립적으로 검사되므로, 서로 다른 행의 셀이
  "같은 값"을 가져야 한다는 사실은 게이트만으로 표현할 수 없다.
  예: 피보나치 테이블에서 행 i의 출력 c_i 가 행 i+1의 입력 b_{i+1} 이 될 때.

  해결: 순열에 등록된 m개 열 × n개 행의 위치에 순열 σ를 정의하고,
  같은 값을 가져야 하는 위치들을 하나의 순환(cycle)으로 묶는다.
  "w_{σ(i)} = wᵢ for all i" 이면 모든 copy constraint가 성립한다.

**순환 병합**:
  초기 순열은 항등 순열 σ(i) = i.
  copy(p, q)마다 σ(p)와 σ(q)를 맞바꾸면 두 순환이 하나로 합쳐진다.
  단, p와 q가 이미 같은 순환에 있으면 맞바꾸기가 순환을 쪼개므로
  대표원(aux)을 추적해 그런 경우는 건너뛴다.

**코셋 식별자 δ^j**:
  j번째 순열 열의 위치는 코셋 δ^j·H 의 원소로 식별한다.
  δ = g^(2^28) 은 홀수 위수를 가지므로 δ^j·H 들은 서로 겹치지 않는다.

**Grand Product (순열 누적자 z)**:
  z(ω⁰) = 1
  z(ωⁱ⁺¹) = z(ωⁱ) · ∏ⱼ (wⱼ(ωⁱ) + β·δ^j·ωⁱ + γ) / (wⱼ(ωⁱ) + β·σⱼ(ωⁱ) + γ)
  순열이 올바르면 n행 전체의 곱이 1로 되돌아온다.

사용 예시:
    >>> perm = PermutationAssembly([col_b, col_c])
    >>> perm.copy(col_c, 0, col_b, 1)   # c₀ == b₁
    >>> perm.cycles()
"""

from fibzk.plonk.errors import ColumnNotInPermutation
from fibzk.plonk.field import FR, MULTIPLICATIVE_GENERATOR, TWO_ADICITY


# 코셋 식별자 생성자: 위수가 홀수인 원소
DELTA = MULTIPLICATIVE_GENERATOR ** (2 ** TWO_ADICITY)


class PermutationAssembly:
    """copy constraint들을 순환(cycle)들로 모으는 순열 구성기.

    위치는 (열 번호, 행) 튜플이다. 열 번호는 columns 리스트에서의 순서.
    건드리지 않은 위치는 항등 사상(자기 자신)으로 간주한다.

    속성:
        columns: 순열에 등록된 Column 리스트
        mapping: 위치 → σ(위치)
        aux: 위치 → 순환의 대표 위치
        sizes: 대표 위치 → 순환 크기
    """

    def __init__(self, columns):
        self.columns = list(columns)
        self.mapping = {}
        self.aux = {}
        self.sizes = {}

    def _position(self, column, row):
        try:
            return (self.columns.index(column), row)
        except ValueError:
            raise ColumnNotInPermutation(column) from None

    def _members(self, position):
        """position이 속한 순환의 모든 위치."""
        members = [position]
        current = self.mapping.get(position, position)
        while current != position:
            members.append(current)
            current = self.mapping.get(current, current)
        return members

    def copy(self, left_column, left_row, right_column, right_row):
        """두 셀이 같은 값을 갖도록 순환을 병합한다.

        Raises:
            ColumnNotInPermutation: 어느 한 열이라도 순열에 없을 때
        """
        left = self._position(left_column, left_row)
        right = self._position(right_column, right_row)

        left_root = self.aux.get(left, left)
        right_root = self.aux.get(right, right)
        # 이미 같은 순환이면 맞바꾸기가 순환을 쪼갠다
        if left_root == right_root:
            return

        # 작은 순환을 큰 순환에 흡수
        if self.sizes.get(left_root, 1) < self.sizes.get(right_root, 1):
            left, right = right, left
            left_root, right_root = right_root, left_root

        self.sizes[left_root] = self.sizes.get(left_root, 1) + self.sizes.get(right_root, 1)
        for member in self._members(right):
            self.aux[member] = left_root

        self.mapping[left], self.mapping[right] = (
            self.mapping.get(right, right),
            self.mapping.get(left, left),
        )

    def sigma(self, column_index, row):
        """σ(열 번호, 행)."""
        position = (column_index, row)
        return self.mapping.get(position, position)

    def cycles(self):
        """길이 2 이상의 순환들을 정렬된 위치 리스트로 반환한다."""
        seen = set()
        result = []
        for position in sorted(self.mapping):
            if position in seen:
                continue
            members = self._members(position)
            seen.update(members)
            if len(members) > 1:
                result.append(sorted(members))
        return sorted(result)


def coset_identifier(column_index, row, domain):
    """위치 (열 j, 행 i)를 코셋 원소 δ^j · ωⁱ 로 식별한다."""
    return DELTA ** column_index * domain[row]


def compute_accumulator(column_values, assembly, domain, beta, gamma):
    """순열 누적자(grand product accumulator) z의 평가값을 계산한다.

    분자: "순열 σ가 항등"이라 가정했을 때의 값
    분모: "실제 순열 σ"를 적용한 값

    Args:
        column_values: 순열 열별 값 리스트 (각 길이 n, FR)
        assembly: PermutationAssembly
        domain: [ω⁰, ..., ω^{n-1}]
        beta: β 챌린지 (FR)
        gamma: γ 챌린지 (FR)

    Returns:
        list[FR]: [z(ω⁰)=1, z(ω¹), ..., z(ω^n)] — 길이 n+1,
                  순열이 값과 일치하면 마지막 원소가 1
    """
    n = len(domain)
    z_evals = [FR(1)]

    for i in range(n):
        num = FR(1)
        den = FR(1)
        for j, values in enumerate(column_values):
            # 분자: wⱼ(ωⁱ) + β·δ^j·ωⁱ + γ
            num = num * (values[i] + beta * coset_identifier(j, i, domain) + gamma)
            # 분모: wⱼ(ωⁱ) + β·σⱼ(ωⁱ) + γ
            sigma_column, sigma_row = assembly.sigma(j, i)
            den = den * (values[i] + beta * coset_identifier(sigma_column, sigma_row, domain) + gamma)
        z_evals.append(z_evals[-1] * num / den)

    return z_evals
