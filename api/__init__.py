"""
API 層

每個 router 只做三件事：解析呼叫者、經過 Authorizer、呼叫 core
"""
