"""Utils for tests"""
from payengine.formula.constants import ALLOWANCE, CUSTOM, DEDUCTION, TAX
from payengine.formula.utils.definitions import FormulaDefinition


class DummyObject:
    """A dummy object with attributes passed in __init__"""

    def __init__(self, **kwargs):
        self.__dict__.update(kwargs)

    def __repr__(self):
        return f"DummyObject {self.__dict__}"


class FormulaUtil:
    """
    Utility class to create formula sets for testing

    default configs are:

        HRA: 0.4 * Basic Salary
        PF: 0.12 * Basic Salary
        Overtime Pay: Overtime Hours * 50
        Total Addition: Basic Salary + HRA + Overtime Pay
        Tax: 0.1 * Total Addition
        Net Salary: Total Addition - PF - Tax
    """

    FORMULA_CONFIG = (
        ('HRA', 'BasicSalary * 0.4', ALLOWANCE, 1),
        ('PF', 'BasicSalary * 0.12', DEDUCTION, 2),
        ('OvertimePay', 'OvertimeHours * 50', ALLOWANCE, 3),
        ('TotalAddition', 'BasicSalary + HRA + OvertimePay', CUSTOM, 4),
        ('Tax', '0.1 * TotalAddition', TAX, 5),
        ('NetSalary', 'TotalAddition - PF - Tax', CUSTOM, 6),
    )

    def __init__(self, **overrides):
        """
        :param overrides: formula name to dict of FormulaDefinition kwargs
        """
        self.overrides = overrides

    def create_formulas(self):
        formulas = []
        for name, expression, formula_type, priority in self.FORMULA_CONFIG:
            kwargs = dict(
                name=name,
                expression=expression,
                formula_type=formula_type,
                priority=priority
            )
            kwargs.update(self.overrides.get(name, {}))
            formulas.append(FormulaDefinition(**kwargs))
        return formulas
