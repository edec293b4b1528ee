from payengine.formula.utils import calculator, calculator_variable, evaluator, rule_validator


class PayrollFormulaEngine(object):
    """Entry point used by payroll processing.

    The engine holds no state; one instance can serve concurrent payroll
    runs.
    """

    def evaluate(self, expression, variables):
        return evaluator.evaluate(expression, variables)

    def evaluate_condition(self, expression, variables):
        return evaluator.evaluate_condition(expression, variables)

    def validate(self, expression, declared_variables):
        return rule_validator.validate(expression, declared_variables)

    def extract_variables(self, expression):
        return rule_validator.extract_variables(expression)

    def list_available_variables(self, context):
        return calculator_variable.list_available_variables(context)

    def run_batch(self, context, formulas):
        return calculator.run_batch(context, formulas)

    def calculate_overtime_amount(self, overtime_hours, basic_salary, overtime_rate):
        return calculator.calculate_overtime_amount(
            overtime_hours,
            basic_salary,
            overtime_rate
        )

    def summarize_results(self, results, formulas):
        return calculator.summarize_results(results, formulas)
