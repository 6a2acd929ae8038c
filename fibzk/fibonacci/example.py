"""
피보나치 회로 데모: f(0)=1, f(1)=2 일 때 f(9) = 89
=====================================================

이 스크립트는 회로 구성부터 검사까지의 전체 흐름을 시연한다.

실행:
    python -m fibzk.fibonacci.example

흐름:
    1. 회로 구성 (공개 인덱스 모드)
    2. 구조 패스 (witness 없이 테이블 모양 확정)
    3. witness 합성 + MockProver 검사
    4. 잘못된 z로 검사 (실패해야 함)
    5. 잘못된 공개 k로 검사 (실패해야 함)
"""

from fibzk.fibonacci.circuit import DEFAULT_K, FibCircuit
from fibzk.fibonacci.driver import recurrence_value
from fibzk.plonk.constraint_system import ADVICE, Column
from fibzk.plonk.dev import MockProver
from fibzk.plonk.field import FR
from fibzk.plonk.keygen import keygen


def main():
    a, b, k = 1, 2, 9
    z = int(recurrence_value(a, b, k))

    print("=" * 60)
    print("  Fibonacci Circuit Demo")
    print(f"  주장: f(0)={a}, f(1)={b} → f({k}) = {z}")
    print("=" * 60)

    # ── 1. 회로 구성 ──
    print("\n[1] 회로 구성...")
    circuit = FibCircuit(a=a, b=b, z=z, k=k)
    print(f"    테이블 높이: 2^{DEFAULT_K} = {1 << DEFAULT_K}")
    print(f"    공개 입력: {[int(v) for v in circuit.public_inputs()[0]]}")

    # ── 2. 구조 패스 ──
    print("\n[2] 구조 패스 (witness 없음)...")
    shape = keygen(DEFAULT_K, circuit)
    print(f"    사용된 행 수: {shape.rows_used}")
    print(f"    copy constraint 순환 수: {len(shape.cycles)}")
    print(f"    게이트: {[gate.name for gate in shape.cs.gates]}")

    # ── 3. witness 합성 + 검사 ──
    print("\n[3] witness 합성 + 검사...")
    prover = MockProver.run(DEFAULT_K, circuit, circuit.public_inputs())
    # configure가 처음 할당한 세 advice 열이 a, b, c
    col_a, col_b, col_c = (Column(ADVICE, i) for i in range(3))
    for row, (x, y, w) in enumerate(zip(
        prover.advice_values(col_a), prover.advice_values(col_b), prover.advice_values(col_c),
    )):
        print(f"      행 {row}: a={int(x)}, b={int(y)}, c={int(w)}")
    failures = prover.verify()
    print(f"    검사 결과: {'성공 ✓' if not failures else '실패 ✗'}")

    # ── 4. 잘못된 z ──
    print(f"\n[4] 잘못된 z = {z + 1} 로 검사...")
    wrong = FibCircuit(a=a, b=b, z=z + 1, k=k)
    wrong_failures = MockProver.run(DEFAULT_K, wrong, wrong.public_inputs()).verify()
    for failure in wrong_failures:
        print(f"      {failure}")
    print(f"    검사 결과: {'성공 ✓' if not wrong_failures else '실패 ✗ (예상대로 실패)'}")

    # ── 5. 잘못된 공개 k ──
    print(f"\n[5] 공개 입력 k = {k + 1} 로 검사...")
    index_failures = MockProver.run(DEFAULT_K, circuit, [[FR(k + 1)]]).verify()
    print(f"    검사 결과: {'성공 ✓' if not index_failures else '실패 ✗ (예상대로 실패)'}")

    print("\n" + "=" * 60)
    ok = not failures and bool(wrong_failures) and bool(index_failures)
    if ok:
        print("  데모 완료: 모든 테스트 통과!")
    else:
        print("  데모 완료: 일부 테스트 실패")
    print("=" * 60)

    return ok


if __name__ == "__main__":
    main()
