"""Core client logic, independent of any CLI or host application.

Module Structure:
    - firebase/ : Firebase Authentication and Realtime Database client

Import explicitly when needed:
    from firerest.core.firebase import FirebaseApp, AppRegistry
"""
