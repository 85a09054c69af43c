"""
Pydantic schemas for API request and response validation.

Request models carry the form rules of the dashboard (lengths, enums,
ranges). Response models are explicit; raw datastore rows are only passed
through where the row shape itself is the contract (dashboard bulk fetch).
"""
