"""Derived product facts"""
