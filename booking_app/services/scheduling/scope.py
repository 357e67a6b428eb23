"""Who a WorkSchedule applies to: the whole business or one employee"""
from typing import Union
from uuid import UUID


class BusinessScope:
    """Business-wide default hours"""

    __slots__ = ()

    def __eq__(self, other):
        return isinstance(other, BusinessScope)

    def __hash__(self):
        return hash("business")

    def __repr__(self):
        return "BusinessScope()"


class EmployeeScope:
    """Hours of a single employee"""

    __slots__ = ("employee_id",)

    def __init__(self, employee_id: UUID):
        self.employee_id = employee_id

    def __eq__(self, other):
        return isinstance(other, EmployeeScope) and other.employee_id == self.employee_id

    def __hash__(self):
        return hash(("employee", self.employee_id))

    def __repr__(self):
        return f"EmployeeScope({self.employee_id})"


Scope = Union[BusinessScope, EmployeeScope]

BUSINESS = BusinessScope()
