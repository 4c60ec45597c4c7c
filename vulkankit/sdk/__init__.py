"""
Vulkan SDK acquisition: version resolution, download URLs, downloads and
platform specific installation.
"""
