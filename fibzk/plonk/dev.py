"""
MockProver — 테이블 직접 검사기
================================

실제 다항식 커밋먼트 없이, 합성된 witness 테이블이 회로의 모든 제약을
만족하는지 행 단위로 직접 검사한다. 개발/테스트용 "검증"이다.

**검사 항목**:
  1. 게이트: 셀렉터가 켜진 모든 행에서 게이트의 각 다항식이 0인가?
     - 질의한 advice 셀이 비어 있으면 CellNotAssigned
     - 다항식 값이 0이 아니면 ConstraintNotSatisfied
  2. 순열(copy constraint): 같은 순환에 묶인 셀들의 값이 모두 같은가?
     - 다르면 PermutationNotSatisfied

  실패는 예외가 아니라 verify()가 돌려주는 리스트로 보고된다.
  예외(SynthesisError 계열)는 합성 자체가 불가능할 때만 발생한다.

**Grand product 검사**:
  verify_permutation_product(β, γ)는 PLONK Round 2의 순열 누적자 z를
  실제로 계산해 n행 전체의 곱이 1인지 확인한다 (permutation.py 참고).

사용 예시:
    >>> prover = MockProver.run(8, circuit, [[FR(9)]])
    >>> prover.verify()        # [] 이면 모든 제약 만족
    >>> prover.assert_satisfied()
"""

import logging

from fibzk.plonk.constraint_system import ADVICE, FIXED, INSTANCE
from fibzk.plonk.errors import InstanceTooLarge, InvalidInstances, VerificationError, WitnessUnknown
from fibzk.plonk.field import FR, get_roots_of_unity, to_field
from fibzk.plonk.keygen import Assembly, configure_circuit
from fibzk.plonk.layouter import Layouter
from fibzk.plonk.permutation import compute_accumulator


logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────
# 검증 실패 기록
# ─────────────────────────────────────────────────────────────────────

class VerifyFailure:
    """검증 실패 기록의 공통 기반 클래스."""

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return vars(self) == vars(other)

    __hash__ = None


class ConstraintNotSatisfied(VerifyFailure):
    """게이트 다항식이 어떤 행에서 0이 아니다.

    속성:
        gate: 게이트 이름
        constraint_index: 게이트 안에서의 제약 번호
        constraint_name: 제약 이름
        row: 절대 행
        region: 그 행을 할당한 region 이름 (없으면 None)
        cell_values: {질의 표기: 정수 값}
    """

    def __init__(self, gate, constraint_index, constraint_name, row, region, cell_values):
        self.gate = gate
        self.constraint_index = constraint_index
        self.constraint_name = constraint_name
        self.row = row
        self.region = region
        self.cell_values = cell_values

    def __repr__(self):
        label = f"{self.gate}[{self.constraint_index}]"
        if self.constraint_name:
            label += f" '{self.constraint_name}'"
        return (
            f"ConstraintNotSatisfied({label}, row={self.row}, "
            f"region={self.region!r}, cells={self.cell_values})"
        )


class CellNotAssigned(VerifyFailure):
    """활성 게이트가 질의한 advice 셀이 할당되지 않았다."""

    def __init__(self, gate, row, region, column):
        self.gate = gate
        self.row = row
        self.region = region
        self.column = column

    def __repr__(self):
        return (
            f"CellNotAssigned({self.gate}, row={self.row}, "
            f"region={self.region!r}, column={self.column})"
        )


class PermutationNotSatisfied(VerifyFailure):
    """copy constraint로 묶인 셀의 값이 σ가 가리키는 셀의 값과 다르다."""

    def __init__(self, column, row):
        self.column = column
        self.row = row

    def __repr__(self):
        return f"PermutationNotSatisfied(column={self.column}, row={self.row})"


# ─────────────────────────────────────────────────────────────────────
# MockProver
# ─────────────────────────────────────────────────────────────────────

class _RowResolver:
    """행 하나에서 표현식을 평가하기 위한 resolver."""

    def __init__(self, prover, row):
        self.prover = prover
        self.row = row

    def selector(self, selector):
        return FR(1) if self.prover.selectors[selector.index][self.row] else FR(0)

    def query(self, column, rotation):
        row = (self.row + rotation) % self.prover.n
        value = self.prover.cell_value(column, row)
        return FR(0) if value is None else value


class MockProver(Assembly):
    """witness 값까지 기록하고 제약을 직접 검사하는 백엔드.

    속성 (Assembly 외):
        advice: advice 열별 값 리스트 (미할당은 None)
        instance: instance 열별 값 리스트 (길이 n, 0으로 패딩)
        rows_used: region들이 차지한 행 수
    """

    def __init__(self, k, cs, instances):
        super().__init__(k, cs)
        self.advice = [[None] * self.n for _ in range(cs.num_advice_columns)]
        self.instance = []
        for values in instances:
            padded = [to_field(v) for v in values]
            padded.extend([FR(0)] * (self.n - len(padded)))
            self.instance.append(padded)
        self.rows_used = 0

    @classmethod
    def run(cls, k, circuit, instances):
        """circuit을 합성하여 검사 준비가 된 MockProver를 반환한다.

        Args:
            k: 테이블 높이 지수 (n = 2^k)
            circuit: witness가 채워진 Circuit
            instances: instance 열별 공개 입력 리스트

        Raises:
            InvalidInstances: 공개 입력 열 수가 맞지 않을 때
            InstanceTooLarge: 공개 입력이 사용 가능한 행보다 길 때
            SynthesisError 계열: 합성 중 구조 오류 (부분 테이블은 버려진다)
        """
        cs, config = configure_circuit(k, circuit)

        if len(instances) != cs.num_instance_columns:
            raise InvalidInstances(
                f"instance 열 {cs.num_instance_columns}개가 필요하지만 "
                f"{len(instances)}개가 주어졌습니다"
            )
        usable = len(cs.usable_rows(1 << k))
        for values in instances:
            if len(values) > usable:
                raise InstanceTooLarge(
                    f"공개 입력 {len(values)}개가 사용 가능한 행 {usable}개를 넘습니다"
                )

        prover = cls(k, cs, instances)
        layouter = Layouter(prover)
        circuit.synthesize(config, layouter)
        prover.rows_used = layouter.rows_used
        logger.debug("mock prover: %d row(s) synthesized at k=%d", prover.rows_used, k)
        return prover

    # ── 백엔드 인터페이스 ──

    def assign_advice(self, annotation, column, row, value):
        super().assign_advice(annotation, column, row, value)
        if value.is_unknown():
            raise WitnessUnknown(
                f"{column} 행 {row} ({annotation!r})에 witness가 없습니다"
            )
        self.advice[column.index][row] = to_field(value.inner)

    # ── 조회 ──

    def cell_value(self, column, row):
        """(column, row)의 값. 미할당 advice/fixed 셀은 None."""
        if column.kind == ADVICE:
            return self.advice[column.index][row]
        if column.kind == FIXED:
            value = self.fixed[column.index][row]
            return None if value is None else to_field(value)
        if column.kind == INSTANCE:
            return self.instance[column.index][row]
        raise ValueError(f"알 수 없는 열입니다: {column}")

    def advice_values(self, column):
        """column의 사용된 행 값 리스트."""
        return self.advice[column.index][:self.rows_used]

    def shape(self, rows_used=None):
        return super().shape(self.rows_used if rows_used is None else rows_used)

    # ── 검사 ──

    def _gate_failures(self):
        failures = []
        for gate in self.cs.gates:
            for row in self.usable_rows:
                if gate.queried_selectors and not any(
                    self.selectors[s.index][row] for s in gate.queried_selectors
                ):
                    continue

                missing = False
                for column, rotation in dict.fromkeys(gate.queried_cells):
                    target = (row + rotation) % self.n
                    if column.kind == ADVICE and self.advice[column.index][target] is None:
                        failures.append(CellNotAssigned(
                            gate.name, row, self.row_regions.get(target), column,
                        ))
                        missing = True
                if missing:
                    continue

                resolver = _RowResolver(self, row)
                for index, poly in enumerate(gate.polynomials):
                    if poly.evaluate(resolver) != FR(0):
                        cell_values = {
                            f"{column}@{rotation:+d}": int(resolver.query(column, rotation))
                            for column, rotation in gate.queried_cells
                        }
                        failures.append(ConstraintNotSatisfied(
                            gate.name, index, gate.constraint_names[index],
                            row, self.row_regions.get(row), cell_values,
                        ))
        return failures

    def _permutation_failures(self):
        failures = []
        for (column_index, row) in sorted(self.permutation.mapping):
            column = self.permutation.columns[column_index]
            target_index, target_row = self.permutation.sigma(column_index, row)
            target = self.permutation.columns[target_index]
            here = self.cell_value(column, row)
            there = self.cell_value(target, target_row)
            here = FR(0) if here is None else here
            there = FR(0) if there is None else there
            if here != there:
                failures.append(PermutationNotSatisfied(column, row))
        return failures

    def verify(self):
        """모든 게이트와 copy constraint를 검사한다.

        Returns:
            list[VerifyFailure]: 빈 리스트면 모든 제약 만족
        """
        failures = self._gate_failures() + self._permutation_failures()
        if failures:
            logger.info("mock prover: %d failure(s)", len(failures))
        else:
            logger.info("mock prover: all constraints satisfied")
        return failures

    def assert_satisfied(self):
        """verify()가 실패를 돌려주면 VerificationError를 던진다."""
        failures = self.verify()
        if failures:
            raise VerificationError(failures)

    def verify_permutation_product(self, beta, gamma):
        """순열 누적자 z의 n행 전체 곱이 1인지 확인한다.

        Args:
            beta, gamma: 순열 인자 챌린지 (FR 또는 int)

        Returns:
            bool
        """
        column_values = []
        for column in self.permutation.columns:
            values = [self.cell_value(column, row) for row in range(self.n)]
            column_values.append([FR(0) if v is None else v for v in values])
        domain = get_roots_of_unity(self.n)
        z_evals = compute_accumulator(
            column_values, self.permutation, domain, to_field(beta), to_field(gamma),
        )
        return z_evals[-1] == FR(1)
