import datetime

import factory

from payengine.formula.constants import CUSTOM
from payengine.formula.tests.utils import DummyObject
from payengine.formula.utils.context import EvaluationContext
from payengine.formula.utils.definitions import FormulaDefinition


class OrganizationFactory(factory.Factory):
    class Meta:
        model = DummyObject

    id = factory.Sequence(lambda n: n + 1)
    name = factory.Faker('company')


class BranchFactory(factory.Factory):
    class Meta:
        model = DummyObject

    id = factory.Sequence(lambda n: n + 1)
    name = factory.Sequence(lambda n: f"Branch-{n}")
    currency = 'USD'


class EmployeeFactory(factory.Factory):
    class Meta:
        model = DummyObject

    id = factory.Sequence(lambda n: n + 1)
    full_name = factory.Faker('name')
    department = 'IT'
    designation = 'Developer'


class EvaluationContextFactory(factory.Factory):
    class Meta:
        model = EvaluationContext

    employee = factory.SubFactory(EmployeeFactory)
    organization = factory.SubFactory(OrganizationFactory)
    branch = factory.SubFactory(BranchFactory)
    basic_salary = 10000
    overtime_hours = 20
    working_days = 22
    actual_working_days = 20
    absent_days = 2
    leave_days = 0
    payroll_period_start = datetime.date(2024, 1, 1)
    payroll_period_end = datetime.date(2024, 1, 31)
    variables = factory.LazyFunction(dict)
    custom_values = factory.LazyFunction(dict)


class FormulaDefinitionFactory(factory.Factory):
    class Meta:
        model = FormulaDefinition

    name = factory.Sequence(lambda n: f"Formula{n}")
    expression = 'BasicSalary * 0.1'
    priority = factory.Sequence(lambda n: n)
    is_active = True
    formula_type = CUSTOM
    description = factory.Faker('sentence')
