"""
Branding board service.

Signed-in users propose a name, logo and description; an admin approves or
rejects each proposal, and approved proposals plus the current logo collect
likes and dislikes. State lives in two JSON documents (or a SQL database when
``DATABASE_URL`` is set).
"""
