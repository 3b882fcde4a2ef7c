"""
Emergency Leak Service - Core Business Logic

Intake form engine for emergency roof-leak service requests: entity
model, validation, property collection editing, prefill merging and
payload transformation. See core.intake.
"""
