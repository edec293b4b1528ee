from decimal import Decimal

# Words that look like identifiers but are never payroll variables
RESERVED_WORDS = frozenset([
    'abs', 'acos', 'asin', 'atan', 'atan2', 'ceiling', 'cos', 'cosh', 'exp',
    'floor', 'log', 'log10', 'max', 'min', 'pow', 'round', 'sign', 'sin',
    'sinh', 'sqrt', 'tan', 'tanh', 'truncate',
    'and', 'or', 'not', 'true', 'false'
])

LOGICAL_KEYWORDS = frozenset(['and', 'or', 'not', 'true', 'false'])

ARITHMETIC_OPERATORS = ('+', '-', '*', '/')
COMPARISON_OPERATORS = ('<=', '>=', '==', '!=', '<', '>')

VARIABLE_NAME_REGEX = r'^[A-Za-z_][A-Za-z0-9_]*$'

# Every amount leaving the engine is quantized to this
FORMULA_DECIMAL_PLACES = 2
CURRENCY_QUANTUM = Decimal('0.01')

DEFAULT_MAX_EXPRESSION_LENGTH = 1000
DEFAULT_MAX_NESTING_DEPTH = 32

# Fixed overtime rule: 8 hours a day, 30 days a month
OVERTIME_HOURS_PER_DAY = 8
OVERTIME_DAYS_PER_MONTH = 30

# Formula type constants
(
    ALLOWANCE,
    DEDUCTION,
    TAX,
    CUSTOM
) = (
    'Allowance',
    'Deduction',
    'Tax',
    'Custom'
)

FORMULA_TYPE_CHOICES = (
    (ALLOWANCE, ALLOWANCE),
    (DEDUCTION, DEDUCTION),
    (TAX, TAX),
    (CUSTOM, CUSTOM)
)

DEDUCTION_FORMULA_TYPES = (DEDUCTION, TAX)

# Seed variables: (variable name, context attribute, description)
(
    BASIC_SALARY,
    OVERTIME_HOURS,
    WORKING_DAYS,
    ACTUAL_WORKING_DAYS,
    ABSENT_DAYS,
    LEAVE_DAYS,
    DAYS_IN_MONTH
) = (
    'BasicSalary',
    'OvertimeHours',
    'WorkingDays',
    'ActualWorkingDays',
    'AbsentDays',
    'LeaveDays',
    'DaysInMonth'
)

CONTEXT_VARIABLES = (
    (BASIC_SALARY, 'basic_salary', "Employee's basic salary"),
    (OVERTIME_HOURS, 'overtime_hours', 'Total overtime hours worked'),
    (WORKING_DAYS, 'working_days', 'Total working days in period'),
    (ACTUAL_WORKING_DAYS, 'actual_working_days', 'Actual days worked'),
    (ABSENT_DAYS, 'absent_days', 'Number of absent days'),
    (LEAVE_DAYS, 'leave_days', 'Number of leave days'),
)

DAYS_IN_MONTH_DESCRIPTION = 'Total days in the month'

# Scope dimensions in the order they are checked
(
    ORGANIZATION_SCOPE,
    BRANCH_SCOPE,
    DEPARTMENT_SCOPE,
    DESIGNATION_SCOPE
) = (
    'organization',
    'branch',
    'department',
    'designation'
)

SCOPE_DIMENSIONS = (
    ORGANIZATION_SCOPE,
    BRANCH_SCOPE,
    DEPARTMENT_SCOPE,
    DESIGNATION_SCOPE
)
