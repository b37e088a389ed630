"""
Microphone loudness: level conversion and tiers, the sampling meter, and the sounddevice source.
"""
