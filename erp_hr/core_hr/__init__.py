"""Core HR module — Employee models, reporting lines and supervision lookups."""

from erp_hr.core_hr.models import Employee, EmployeeSupervisor

__all__ = ["Employee", "EmployeeSupervisor"]
