"""Community Registry package.

Organized by feature modules (members, events) with a thin Flask controller
layer over service/repository layers.
"""
