from payengine.formula.constants import CUSTOM, FORMULA_TYPE_CHOICES


class FormulaDefinition(object):
    """A named payroll formula as supplied by the formula store.

    :param name: unique display key, also the variable name later formulas
        use to refer to this formula's result
    :param expression: formula text
    :param priority: evaluation order, ascending
    :param is_active: inactive formulas are skipped
    :param formula_type: one of ``Allowance``, ``Deduction``, ``Tax``, ``Custom``
    :param description: free text
    :param organization_id: only applies to this organization when set
    :param branch_id: only applies to this branch when set
    :param department: only applies to employees of this department when set
    :param designation: only applies to employees of this designation when set
    :param conditions: condition formula that must hold for the formula to apply
    """

    def __init__(self, **kwargs):
        self.name = kwargs.get('name')
        self.expression = kwargs.get('expression')
        self.priority = kwargs.get('priority') or 0
        self.is_active = kwargs.get('is_active', True)
        self.formula_type = kwargs.get('formula_type') or CUSTOM
        self.description = kwargs.get('description', '')

        self.organization_id = kwargs.get('organization_id')
        self.branch_id = kwargs.get('branch_id')
        self.department = kwargs.get('department')
        self.designation = kwargs.get('designation')
        self.conditions = kwargs.get('conditions')

        assert self.formula_type in dict(FORMULA_TYPE_CHOICES), (
            f'Unknown formula type {self.formula_type}'
        )

    def __repr__(self):
        return f"Formula {self.name} ({self.priority}): {self.expression}"

    def __str__(self):
        return self.name

    @property
    def scope(self):
        from payengine.formula.utils.scope import ScopeSpec
        return ScopeSpec.from_formula(self)
