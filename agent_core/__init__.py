"""Agent container side: tools and the privileged-request client"""
