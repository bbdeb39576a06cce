"""
rnutil - Convert React Native iOS apps from the Libraries group to CocoaPods.
"""

__version__ = "0.1.0"
