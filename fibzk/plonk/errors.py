"""
합성(synthesis) 단계의 오류 정의.

게이트 불만족은 여기의 예외가 아니다. 그것은 MockProver.verify()가
돌려주는 실패 기록(fibzk.plonk.dev)으로만 드러난다.
"""


class SynthesisError(Exception):
    """회로 구성 또는 테이블 할당 중의 치명적 오류. 재시도하지 않는다."""


class AssignmentError(SynthesisError):
    """셀 할당/복사가 회로 설정과 맞지 않을 때."""


class ColumnNotInPermutation(AssignmentError):
    """equality가 허용되지 않은 열에 copy constraint를 걸려고 했을 때."""

    def __init__(self, column):
        super().__init__(
            f"{column} 열은 순열(permutation)에 포함되지 않았습니다 "
            f"(enable_equality 호출 누락)"
        )
        self.column = column


class NotEnoughRowsAvailable(SynthesisError):
    """테이블 높이 2^k 안에 사용 가능한 행이 부족할 때."""

    def __init__(self, current_k, row=None):
        detail = f" (행 {row})" if row is not None else ""
        super().__init__(f"k = {current_k}에서 사용 가능한 행이 부족합니다{detail}")
        self.current_k = current_k
        self.row = row


class BoundsFailure(SynthesisError):
    """존재하지 않는 열이나 음수 행에 접근했을 때."""


class InstanceTooLarge(SynthesisError):
    """공개 입력(instance)이 사용 가능한 행 수보다 길 때."""


class WitnessUnknown(SynthesisError):
    """witness가 필요한 백엔드에 unknown 값이 할당되었을 때."""


class VerificationError(Exception):
    """MockProver.assert_satisfied()가 실패 목록을 감싸 던지는 예외."""

    def __init__(self, failures):
        lines = "\n".join(f"  - {failure}" for failure in failures)
        super().__init__(f"제약 {len(failures)}개가 만족되지 않았습니다:\n{lines}")
        self.failures = list(failures)


class InvalidInstances(SynthesisError):
    """공개 입력 열 수가 회로의 instance 열 수와 다를 때."""
