# Supabase Auth
# Credentials are handled by Supabase's built-in authentication (auth.users).
# No custom tables are required here; the library-side record of a user is the
# profiles row (see modules/profiles/models.py).

"""
Supabase Auth provides:
- auth.sign_up() - Create the credential for a new student
- auth.sign_in_with_password() - Password check after student_id -> email lookup
- auth.get_user() - Resolve a bearer token to its user
- auth.sign_out() - End the session
- auth.admin.delete_user() - Remove a credential whose profile insert failed (service role key)

Students sign in with their student_id; it is resolved to the email stored on
their profile before the password check. The reserved administrator
identifier maps to a fixed internal account that is created on first use.
"""
