"""
피보나치 회로 정의 (FibCircuit)
================================

FibChip과 점화식 드라이버를 Circuit 수명 주기(configure / synthesize)에 묶는다.

**두 가지 모드** (public_index 플래그):
  | 모드          | 공개 입력 | k의 역할                                   |
  |---------------|-----------|--------------------------------------------|
  | 공개 인덱스   | [k]       | 마지막 행의 index_out == instance[0] 로 강제 |
  | 비공개 인덱스 | 없음      | 테이블 높이(행 수)로만 암시됨, 별도 제약 없음 |

  a, b, z는 두 모드 모두 비공개(advice)이다.

**k는 구조 파라미터**:
  행 수가 k에 따라 정해지므로 without_witnesses()도 k를 유지한다.
  witness(a, b, z)만 unknown으로 바뀌며, 두 회로의 테이블 모양은 같다.

사용 예시:
    >>> circuit = FibCircuit(a=1, b=2, z=89, k=9)
    >>> prover = MockProver.run(DEFAULT_K, circuit, circuit.public_inputs())
    >>> prover.verify()   # []
"""

from fibzk.fibonacci.chip import FibChip
from fibzk.fibonacci.driver import assign_recurrence
from fibzk.plonk.field import FR
from fibzk.plonk.layouter import Circuit
from fibzk.plonk.value import Value


# 기본 테이블 높이 지수: 2^8 = 256행
DEFAULT_K = 8


class FibCircuit(Circuit):
    """f(0)=a, f(1)=b 일 때 f(k)=z 를 주장하는 회로.

    속성:
        a, b, z: Value (정수/FR은 known Value로 감싼다)
        k: 증명할 항 번호 (int)
        public_index: True면 k를 공개 입력으로 묶는다
    """

    def __init__(self, a=None, b=None, z=None, k=2, public_index=True):
        self.a = Value.unknown() if a is None else Value.wrap(a)
        self.b = Value.unknown() if b is None else Value.wrap(b)
        self.z = Value.unknown() if z is None else Value.wrap(z)
        self.k = k
        self.public_index = public_index

    def without_witnesses(self):
        return FibCircuit(k=self.k, public_index=self.public_index)

    def configure_with_params(self, meta):
        return self.configure(meta, self.public_index)

    @classmethod
    def configure(cls, meta, public_index=True):
        col_a = meta.advice_column()
        col_b = meta.advice_column()
        col_c = meta.advice_column()
        instance = meta.instance_column() if public_index else None
        return FibChip.configure(meta, [col_a, col_b, col_c], instance)

    def synthesize(self, config, layouter):
        chip = FibChip.construct(config)
        rows = assign_recurrence(chip, layouter, self.a, self.b, self.z, self.k)

        if config.index is not None:
            # 마지막 행의 항 번호 = 공개 입력 k
            layouter.constrain_instance(rows[-1].index_out.cell, config.index.instance, 0)

    def public_inputs(self):
        """Verifier가 제공하는 instance 열 값들."""
        if self.public_index:
            return [[FR(self.k)]]
        return []
