"""
Use Cases

Organized into domain folders:
- auth/: Passwordless sign-in and sign-out
- users/: Caller identity and permission map
- tenants/: Active tenant switching
- notifications/: Acknowledgment, resolution, archival
- escalations/: SLA rules and escalation events
- audit/: Audit log
"""
