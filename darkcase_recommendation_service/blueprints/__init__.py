"""Azure Functions blueprints"""
