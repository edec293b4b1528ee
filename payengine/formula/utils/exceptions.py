from django.utils.translation import gettext_lazy as _

from rest_framework.exceptions import APIException


class FormulaEvaluationError(APIException):
    status_code = 400
    default_detail = _('Formula could not be evaluated.')
    default_code = 'invalid_formula'

    def __init__(self, detail=None, expression=None):
        self.expression = expression
        super().__init__(detail)


class FormulaSyntaxError(FormulaEvaluationError):
    default_detail = _('Formula contains invalid characters or tokens.')
    default_code = 'formula_syntax'

    def __init__(self, detail=None, expression=None, position=None):
        self.position = position
        super().__init__(detail, expression=expression)


class UnresolvedVariableError(FormulaEvaluationError):
    default_detail = _('Formula uses variables that are not available.')
    default_code = 'unresolved_variable'

    def __init__(self, variables, expression=None):
        self.variables = list(variables)
        super().__init__(
            f'{self.variables}: Symbols not available',
            expression=expression
        )


class DivisionByZeroError(FormulaEvaluationError):
    default_detail = _('Division by zero in formula.')
    default_code = 'division_by_zero'
