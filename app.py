#!/usr/bin/env python3
from pkgshelf.launch import main

if __name__ == "__main__":
    main()
