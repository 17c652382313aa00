"""SomethingToDo shared libraries.

This package contains reusable components:
- common: Configuration
- firebase: Firebase Admin initialization and Firestore client
- firestore: Document access for messages, sessions, users and events
- models: Firestore document models
"""
