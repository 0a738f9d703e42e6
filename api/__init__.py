"""HTTP surface for RuleWeave (FastAPI app plus the AWS Lambda handler)."""
