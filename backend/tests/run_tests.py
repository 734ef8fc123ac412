#!/usr/bin/env python3
"""
测试运行脚本
按测试集（unit / interface / all）运行，使用内存数据库并关闭MLflow与外部凭据
"""

import argparse
import os
import subprocess
import sys

SUITES = {
    "unit": ["tests/unit/", "-m", "unit"],
    "interface": ["tests/interface/", "-m", "interface"],
    "all": ["tests/"],
}


def main():
    parser = argparse.ArgumentParser(description="运行 Image Arena 测试")
    parser.add_argument("suite", nargs="?", default="all", choices=sorted(SUITES))
    args, extra = parser.parse_known_args()

    env = os.environ.copy()
    env["UNIT_TESTING"] = "true"
    env["LOG_LEVEL"] = "ERROR"
    env["ENABLE_MLFLOW"] = "false"
    env["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

    cmd = [sys.executable, "-m", "pytest", *SUITES[args.suite], "-v", "--tb=short", *extra]

    result = subprocess.run(cmd, env=env, cwd=os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    sys.exit(result.returncode)


if __name__ == "__main__":
    main()
