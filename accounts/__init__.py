"""
Account service application code.

- models: Account record
- services: Account store, verification codes, email delivery
- pipelines: Orchestration for each endpoint
- routers: FastAPI routes
- schemas: Request and response models
- config: Application settings

Uses generic infrastructure from the common/ package.
"""
