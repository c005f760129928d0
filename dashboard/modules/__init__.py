"""
Feature modules for the HygieneQuest dashboard.

- auth: phone + OTP login, the 20-minute session and its countdown
- attendance: attendance listings, filters and overview statistics
- exports: role policy, export token, OTP-gated workflow and CSV files
- export_requests: field-worker requests and super-admin approval

Each module keeps its Protocols in interfaces.py, pydantic models in
models.py, errors in exceptions.py and the implementation in service.py.
The CLI wires them together in cli/dependencies.py.
"""
