"""
API模块
backend/app/api/__init__.py
路由汇总见 app/api/main.py
"""
