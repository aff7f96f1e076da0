from __future__ import annotations

from typing import Optional, Protocol

from .model import Employee


class EmployeeRepository(Protocol):
    """Giao diện repository cho Employee.

    Lưu ý (DIP): tầng service phụ thuộc vào interface này, không phụ thuộc trực tiếp DB cụ thể.
    """

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError
