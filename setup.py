from cx_Freeze import setup, Executable

# Definir las dependencias que se incluirán en el paquete
build_exe_options = {
    # pythonnet (clr) para el ensamblado de WSUS; DuckDB y Pandas para los reportes.
    "packages": [
        "os", "sys", "configparser", "logging", "argparse",
        "clr", "duckdb", "pandas", "numpy"
    ],
    "excludes": ["tkinter"],
    "include_files": [
        ("configs", "configs"),  # Incluye la carpeta configs
        ("libs", "libs"),        # Incluye la carpeta libs
    ],
}

# Un ejecutable de consola por script de mantenimiento
executables = [
    Executable(
        "main_declinar.py",
        base=None,
        target_name="WsusDeclinarReemplazadas.exe",
        icon=None,
    ),
    Executable(
        "main_autoaprobar.py",
        base=None,
        target_name="WsusAutoaprobar.exe",
        icon=None,
    ),
]

setup(
    name="WsusMantenimiento",
    version="1.0",
    description="WSUS maintenance scripts: decline superseded updates and two-stage auto-approval.",
    py_modules=["main_declinar", "main_autoaprobar"],
    packages=["libs", "libs.wsus", "libs.config", "libs.declinar", "libs.aprobar", "libs.reporte"],
    python_requires=">=3.8",
    install_requires=[
        "pythonnet>=3.0",
        "duckdb>=0.9",
        "pandas>=1.5",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "wsus-declinar=main_declinar:main",
            "wsus-autoaprobar=main_autoaprobar:main",
        ],
    },
    options={"build_exe": build_exe_options},
    executables=executables,
)
