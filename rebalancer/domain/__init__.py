"""
Domain Layer - Pure Business Logic

Structure:
- entities/: Request-scoped rebalance entities (request, quote, plan, outcome)
- services/: Domain services (lot-size quantization, rebalance planning)
"""
