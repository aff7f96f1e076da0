from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Employee:
    """Thực thể miền (domain): Nhân viên.

    Chỉ giữ các trường định danh được đính kèm vào bản ghi chấm công.
    """

    employee_id: str
    name: str
    email: str

    def to_dict(self) -> dict:
        return {"id": self.employee_id, "name": self.name, "email": self.email}
