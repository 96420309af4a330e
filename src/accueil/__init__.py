"""
Accueil - account provisioning and wallet initialization.

Turns an authenticated identity into exactly one profile and one wallet,
whichever entry point (signup, OAuth, session resume) gets there first.
"""

__version__ = "0.1.0"
