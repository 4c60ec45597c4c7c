"""
vulkankit - installs the Vulkan SDK (and runtime) inside CI jobs.
"""
