from django.apps import AppConfig


class FormulaConfig(AppConfig):
    name = 'payengine.formula'
    verbose_name = 'Payroll Formula'
