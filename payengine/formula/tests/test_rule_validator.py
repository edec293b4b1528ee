from django.test import SimpleTestCase

from payengine.formula.tests.factory import FormulaDefinitionFactory
from payengine.formula.utils.exceptions import FormulaSyntaxError
from payengine.formula.utils.rule_validator import (
    ConditionEquation,
    FormulaValidator,
    RuleEquation,
    extract_variables,
    validate
)


class TestExtractVariables(SimpleTestCase):
    def test_extract_variables(self):
        self.assertEqual(
            set(extract_variables('round(BasicSalary * 0.1) + max(OvertimeHours)')),
            {'BasicSalary', 'OvertimeHours'}
        )

    def test_order_of_first_use_without_duplicates(self):
        self.assertEqual(
            extract_variables('HRA + BasicSalary * 2 - HRA / WorkingDays'),
            ['HRA', 'BasicSalary', 'WorkingDays']
        )

    def test_keywords_are_not_variables(self):
        self.assertEqual(
            extract_variables('WorkingDays > 20 AND not AbsentDays == 0 or TRUE'),
            ['WorkingDays', 'AbsentDays']
        )

    def test_empty_formula(self):
        self.assertEqual(extract_variables(''), [])
        self.assertEqual(extract_variables(None), [])
        self.assertEqual(extract_variables('12 * 3'), [])

    def test_invalid_characters(self):
        with self.assertRaises(FormulaSyntaxError):
            extract_variables('BasicSalary % 2')


class TestValidate(SimpleTestCase):
    declared = ['BasicSalary', 'OvertimeHours', 'HRA']

    def test_valid_formulas(self):
        for expression in (
            'BasicSalary * 0.1',
            '(BasicSalary + HRA) * 0.12',
            '-OvertimeHours * 50',
            '1500',
        ):
            self.assertTrue(validate(expression, self.declared), expression)

    def test_invalid_formulas(self):
        for expression in (
            '',
            None,
            'BasicSalary *',
            '(BasicSalary + HRA',
            'BasicSalary * Bonus',
            'round(BasicSalary)',
            'BasicSalary % 2',
            'BasicSalary > 1',
            'import os',
        ):
            self.assertFalse(validate(expression, self.declared), expression)

    def test_nothing_declared(self):
        self.assertTrue(validate('100 * 2', []))
        self.assertFalse(validate('BasicSalary * 2', []))


class TestRuleEquation(SimpleTestCase):
    def test_error_messages(self):
        equation = RuleEquation(['BasicSalary'], equation='BasicSalary * Bonus + Grade')
        self.assertFalse(equation.is_valid)
        self.assertEqual(equation.used_variables, ['BasicSalary', 'Bonus', 'Grade'])
        self.assertEqual(
            equation.error_messages,
            ["['Bonus', 'Grade']: Symbols not available"]
        )

    def test_grammar_errors_are_reported(self):
        equation = RuleEquation(['BasicSalary'], equation='BasicSalary * (2')
        self.assertFalse(equation.is_valid)
        self.assertEqual(len(equation.error_messages), 1)
        self.assertIn('Missing closing parenthesis', equation.error_messages[0])


class TestConditionEquation(SimpleTestCase):
    def test_valid_condition(self):
        equation = ConditionEquation(
            ['WorkingDays', 'AbsentDays'],
            equation='WorkingDays >= 20 and not AbsentDays > 2'
        )
        self.assertTrue(equation.is_valid)

    def test_invalid_condition(self):
        for condition in (
            'WorkingDays >=',
            'WorkingDays = 20',
            '1 < WorkingDays < 30',
            'Grade > 2',
        ):
            equation = ConditionEquation(['WorkingDays'], equation=condition)
            self.assertFalse(equation.is_valid, condition)


class TestFormulaValidator(SimpleTestCase):
    def test_valid_formula(self):
        formula = FormulaDefinitionFactory(
            expression='BasicSalary * 0.1',
            conditions='AbsentDays == 0'
        )
        validator = FormulaValidator(formula, ['BasicSalary', 'AbsentDays'])
        self.assertTrue(validator.is_valid)
        self.assertEqual(validator.used_variables, ['BasicSalary', 'AbsentDays'])
        self.assertEqual(
            validator.error_messages,
            {'rule_equation_errors': [], 'condition_equation_errors': []}
        )

    def test_invalid_condition_invalidates_formula(self):
        formula = FormulaDefinitionFactory(
            expression='BasicSalary * 0.1',
            conditions='LeaveDays > 1'
        )
        validator = FormulaValidator(formula, ['BasicSalary'])
        self.assertFalse(validator.is_valid)
        self.assertEqual(validator.error_messages['rule_equation_errors'], [])
        self.assertEqual(
            validator.error_messages['condition_equation_errors'],
            ["['LeaveDays']: Symbols not available"]
        )

    def test_formula_without_conditions(self):
        formula = FormulaDefinitionFactory(expression='BasicSalary *')
        validator = FormulaValidator(formula, ['BasicSalary'])
        self.assertIsNone(validator.condition_equation)
        self.assertFalse(validator.is_valid)
