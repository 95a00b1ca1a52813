"""
Labelled form builders: every field is rendered together with a label and
its validation errors.
"""
