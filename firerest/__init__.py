"""firerest: Firebase Authentication and Realtime Database over REST.

To use the client:
    from firerest.core.firebase import FirebaseApp

To load settings from the environment:
    from firerest.config import load_settings
"""
