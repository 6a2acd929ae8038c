"""
FibCircuit 통합 테스트.

테스트 대상:
  - 완전성: 올바른 (a, b, k, z)는 모든 제약을 만족
  - 건전성: 틀린 z, 틀린 공개 k는 실패로 보고
  - 구조: 행 연결(b_i = c_{i-1}), 결정성, keygen과 witness 합성의 모양 일치
  - 거부: k < 2
"""

import pytest

from fibzk.fibonacci.circuit import DEFAULT_K, FibCircuit
from fibzk.fibonacci.driver import InvalidIndexError, recurrence_value
from fibzk.fibonacci.example import main
from fibzk.plonk.constraint_system import ADVICE, Column
from fibzk.plonk.dev import ConstraintNotSatisfied, MockProver, PermutationNotSatisfied
from fibzk.plonk.errors import NotEnoughRowsAvailable, VerificationError
from fibzk.plonk.field import FR
from fibzk.plonk.keygen import keygen


COL_A, COL_B, COL_C = (Column(ADVICE, i) for i in range(3))
MODES = [True, False]


def run(circuit, instances=None):
    if instances is None:
        instances = circuit.public_inputs()
    return MockProver.run(DEFAULT_K, circuit, instances)


# ─────────────────────────────────────────────────────────────────────
# 완전성
# ─────────────────────────────────────────────────────────────────────

class TestCompleteness:
    """올바른 주장은 통과."""

    @pytest.mark.parametrize("public_index", MODES)
    @pytest.mark.parametrize("k, z", [(9, 89), (8, 55)])
    def test_valid_claim(self, public_index, k, z):
        """f(9)=89, f(8)=55 주장 (두 모드)."""
        circuit = FibCircuit(a=1, b=2, z=z, k=k, public_index=public_index)
        prover = run(circuit)
        assert prover.verify() == []
        prover.assert_satisfied()
        assert prover.rows_used == k - 1

    @pytest.mark.parametrize("public_index", MODES)
    def test_smallest_claim(self, public_index):
        """k=2: 행 하나짜리 주장."""
        assert run(FibCircuit(a=3, b=4, z=7, k=2, public_index=public_index)).verify() == []

    def test_field_elements(self):
        """FR 입력도 정수 입력과 같게 동작."""
        circuit = FibCircuit(a=FR(1), b=FR(2), z=FR(89), k=9)
        assert run(circuit).verify() == []

    def test_long_recurrence(self):
        """모듈러 연산으로 값이 필드를 넘어가도 통과한다."""
        k = 200
        z = recurrence_value(1, 1, k)
        assert run(FibCircuit(a=1, b=1, z=z, k=k)).verify() == []

    def test_grand_product(self):
        """올바른 테이블의 순열 누적자는 1로 돌아온다."""
        prover = run(FibCircuit(a=1, b=2, z=89, k=9))
        assert prover.verify_permutation_product(FR(8), FR(13))


# ─────────────────────────────────────────────────────────────────────
# 건전성
# ─────────────────────────────────────────────────────────────────────

class TestSoundness:
    """틀린 주장은 실패로 보고."""

    @pytest.mark.parametrize("public_index", MODES)
    def test_wrong_claim(self, public_index):
        """틀린 z는 마지막 행의 add 게이트에서 실패."""
        prover = run(FibCircuit(a=1, b=2, z=55, k=9, public_index=public_index))
        failures = prover.verify()
        assert len(failures) == 1
        failure = failures[0]
        assert isinstance(failure, ConstraintNotSatisfied)
        assert failure.gate == "add"
        assert failure.row == 7
        assert failure.region == "assign f_7, f_8, f_9/fib row"
        assert failure.cell_values["advice[2]@+0"] == 55

    def test_wrong_claim_other_seeds(self):
        """a=5, b=8, k=11, z=55 는 행 9에서 실패."""
        prover = run(FibCircuit(a=5, b=8, z=55, k=11))
        failures = prover.verify()
        assert [(f.gate, f.row) for f in failures] == [("add", 9)]

    def test_assert_satisfied_raises(self):
        """assert_satisfied는 VerificationError를 던진다."""
        with pytest.raises(VerificationError):
            run(FibCircuit(a=1, b=2, z=90, k=9)).assert_satisfied()

    def test_wrong_public_index(self):
        """공개 k가 다르면 순열 검사와 grand product 모두 실패."""
        circuit = FibCircuit(a=1, b=2, z=89, k=9)
        prover = run(circuit, [[FR(10)]])
        failures = prover.verify()
        assert failures
        assert all(isinstance(f, PermutationNotSatisfied) for f in failures)
        assert not prover.verify_permutation_product(FR(8), FR(13))

    def test_claim_for_other_index(self):
        """f(8) = 55 를 k = 9 로 주장하면 실패."""
        assert run(FibCircuit(a=1, b=2, z=55, k=9)).verify() != []


# ─────────────────────────────────────────────────────────────────────
# 구조
# ─────────────────────────────────────────────────────────────────────

class TestLayout:
    """테이블 구조 테스트."""

    def test_rows_are_chained(self):
        """행 i의 b는 행 i-1의 c와 같다."""
        prover = run(FibCircuit(a=1, b=2, z=89, k=9))
        b = prover.advice_values(COL_B)
        c = prover.advice_values(COL_C)
        for i in range(1, len(b)):
            assert b[i] == c[i - 1]

    def test_table_contents(self):
        """a, c 열에 수열이 차례로 들어간다."""
        prover = run(FibCircuit(a=1, b=2, z=89, k=9, public_index=False))
        assert [int(v) for v in prover.advice_values(COL_A)] == [1, 2, 3, 5, 8, 13, 21, 34]
        assert [int(v) for v in prover.advice_values(COL_C)] == [3, 5, 8, 13, 21, 34, 55, 89]

    def test_cycles(self):
        """행 i의 c와 행 i+1의 b가 copy constraint로 묶인다."""
        shape = keygen(DEFAULT_K, FibCircuit(a=1, b=2, z=89, k=4, public_index=False))
        assert shape.cycles == [[(1, 1), (2, 0)], [(1, 2), (2, 1)]]

    @pytest.mark.parametrize("public_index", MODES)
    def test_deterministic(self, public_index):
        """같은 입력은 같은 테이블."""
        first = run(FibCircuit(a=1, b=2, z=89, k=9, public_index=public_index))
        second = run(FibCircuit(a=1, b=2, z=89, k=9, public_index=public_index))
        assert first.advice == second.advice
        assert first.shape() == second.shape()

    @pytest.mark.parametrize("public_index", MODES)
    def test_keygen_matches_witnessed_shape(self, public_index):
        """구조 패스의 모양 = witness 합성의 모양."""
        circuit = FibCircuit(a=1, b=2, z=89, k=9, public_index=public_index)
        assert keygen(DEFAULT_K, circuit) == run(circuit).shape()

    def test_shape_independent_of_witness(self):
        """모양은 witness 값과 무관."""
        honest = keygen(DEFAULT_K, FibCircuit(a=1, b=2, z=89, k=9))
        other = keygen(DEFAULT_K, FibCircuit(a=7, b=7, z=0, k=9))
        assert honest == other

    def test_without_witnesses(self):
        """witness만 unknown이 되고 k는 유지."""
        circuit = FibCircuit(a=1, b=2, z=89, k=9, public_index=False)
        blank = circuit.without_witnesses()
        assert blank.a.is_unknown()
        assert blank.b.is_unknown()
        assert blank.z.is_unknown()
        assert blank.k == 9
        assert blank.public_index is False

    def test_public_inputs(self):
        """공개 인덱스 모드에서만 [k]를 공개."""
        assert FibCircuit(k=9).public_inputs() == [[FR(9)]]
        assert FibCircuit(k=9, public_index=False).public_inputs() == []

    def test_too_many_rows(self):
        """사용 가능 행을 넘는 k는 합성 오류."""
        # 2^8 테이블의 사용 가능 행은 250개
        with pytest.raises(NotEnoughRowsAvailable):
            run(FibCircuit(a=1, b=1, z=0, k=252))


# ─────────────────────────────────────────────────────────────────────
# 거부
# ─────────────────────────────────────────────────────────────────────

class TestInvalidIndex:
    """k < 2 거부."""

    @pytest.mark.parametrize("k", [1, 0])
    def test_mock_prover(self, k):
        """MockProver.run에서 거부."""
        with pytest.raises(InvalidIndexError):
            run(FibCircuit(a=1, b=2, z=1, k=k))

    @pytest.mark.parametrize("k", [1, 0])
    def test_keygen(self, k):
        """구조 패스에서도 거부."""
        with pytest.raises(InvalidIndexError):
            keygen(DEFAULT_K, FibCircuit(k=k, public_index=False))


def test_example_runs():
    """데모 스크립트가 성공으로 끝난다."""
    assert main() is True
